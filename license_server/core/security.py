from passlib.context import CryptContext

# Admin key hashing
pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
    argon2__time_cost=2,
    argon2__memory_cost=102400,
    argon2__parallelism=8
)

def get_admin_key_hash(admin_key: str) -> str:
    return pwd_context.hash(admin_key)

def verify_admin_key(admin_key: str, admin_key_hash: str) -> bool:
    return pwd_context.verify(admin_key, admin_key_hash)
