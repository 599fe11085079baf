import hashlib

def generate_hash(raw: str) -> str:
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()
