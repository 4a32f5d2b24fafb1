import getpass

import bcrypt

BCRYPT_ROUNDS = 12

def hash_password(password: str) -> str:
    # Hash bcrypt avec salt auto (12 rounds)
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
    return hashed.decode("utf-8")

def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # hash stocké mal formé
        return False

if __name__ == "__main__":
    # Génère le hash à insérer dans admin_users.password_hash
    secret = getpass.getpass("Mot de passe admin: ")
    print(f"Hashed password: {hash_password(secret)}")
