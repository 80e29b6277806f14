import hashlib
from itsdangerous import URLSafeSerializer
from .config import SECRET_KEY, SIGNING_BASE_URL

def sha256_bytes(b: bytes) -> str:
    return hashlib.sha256(b).hexdigest()

def make_token(payload: dict) -> str:
    s = URLSafeSerializer(SECRET_KEY, salt="contract-signing")
    return s.dumps(payload)

def read_token(token: str) -> dict:
    s = URLSafeSerializer(SECRET_KEY, salt="contract-signing")
    return s.loads(token)

def signing_link(contract_id: int, signer_id: int) -> str:
    token = make_token({"contract_id": contract_id, "signer_id": signer_id})
    return f"{SIGNING_BASE_URL}/{token}"
