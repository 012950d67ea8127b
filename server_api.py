# server_api.py
import logging
from typing import List

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from shielded_audit.config import settings
from shielded_audit.custom_rlwe.keys import SecretShare
from shielded_audit.custom_rlwe.rlwe_scheme import AuditEncryptor, PublicKeyCache
from shielded_audit.custom_rlwe.threshold import ThresholdDecryptor
from shielded_audit.errors import (
    ArithmeticConsistencyError,
    EncodingError,
    KeyMaterialError,
    KeyUnavailableError,
    ShareSetError,
)
from shielded_audit.retrieval import public_key_loader

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.PROJECT_NAME)

# The public key is fetched on the first encryption, not at import time
AUDIT_ENCRYPTOR = AuditEncryptor(PublicKeyCache(public_key_loader()))
AUDIT_DECRYPTOR = ThresholdDecryptor()


def get_encryptor() -> AuditEncryptor:
    return AUDIT_ENCRYPTOR


def get_decryptor() -> ThresholdDecryptor:
    return AUDIT_DECRYPTOR


class EncryptRequest(BaseModel):
    owner_x: str = Field(description="decimal or 0x-hex field element")
    owner_y: str


class CiphertextBody(BaseModel):
    c0: List[str]
    c1: List[str]


class DecryptRequest(BaseModel):
    ciphertext: CiphertextBody
    shares: List[dict]


class IdentityResponse(BaseModel):
    owner_x: str
    owner_y: str


def _parse_owner(value: str) -> int:
    text = value.strip()
    try:
        return int(text, 16) if text.lower().startswith("0x") else int(text, 10)
    except ValueError:
        raise EncodingError(f"malformed field element {value!r}") from None


@app.exception_handler(KeyUnavailableError)
async def key_unavailable_handler(request: Request, exc: KeyUnavailableError):
    return JSONResponse(status_code=503, content={"error": "key unavailable", "detail": str(exc)})


@app.exception_handler(KeyMaterialError)
async def key_material_handler(request: Request, exc: KeyMaterialError):
    return JSONResponse(status_code=422, content={"error": "invalid key material", "detail": str(exc)})


@app.exception_handler(ShareSetError)
async def share_set_handler(request: Request, exc: ShareSetError):
    return JSONResponse(status_code=422, content={"error": "invalid share set", "detail": str(exc)})


@app.exception_handler(EncodingError)
async def encoding_handler(request: Request, exc: EncodingError):
    return JSONResponse(status_code=400, content={"error": "encoding error", "detail": str(exc)})


@app.exception_handler(ArithmeticConsistencyError)
async def arithmetic_handler(request: Request, exc: ArithmeticConsistencyError):
    logger.error("Arithmetic consistency failure: %s", exc)
    return JSONResponse(status_code=500, content={"error": "internal arithmetic error"})


@app.get("/")
def home(encryptor: AuditEncryptor = Depends(get_encryptor)):
    return {"status": "Audit Server Online", **encryptor.params}


@app.post("/audit/encrypt")
def audit_encrypt(body: EncryptRequest, encryptor: AuditEncryptor = Depends(get_encryptor)):
    """
    Receives: identity public key coordinates
    Returns: ciphertext record with noise and quotient witnesses (hex arrays)
    """
    encryption = encryptor.encrypt(_parse_owner(body.owner_x), _parse_owner(body.owner_y))
    return encryption.to_record()


@app.post("/audit/decrypt", response_model=IdentityResponse)
def audit_decrypt(body: DecryptRequest, decryptor: ThresholdDecryptor = Depends(get_decryptor)):
    """
    Receives: ciphertext (c0, c1) + a quorum of share artifacts
    Returns: recovered identity
    """
    shares = [SecretShare.from_artifact(s, decryptor.N) for s in body.shares]
    logger.info("Decrypt request with %d shares", len(shares))
    recovered = decryptor.decrypt_from_shares(body.ciphertext.model_dump(), shares)
    return IdentityResponse(owner_x=f"0x{recovered.owner_x:064x}",
                            owner_y=f"0x{recovered.owner_y:064x}")
