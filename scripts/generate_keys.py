"""
Generate the RSA (RS256) key pair used to sign and verify access tokens.
Run once before starting the application:

    python scripts/generate_keys.py
"""

from pathlib import Path

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa


def generate_rsa_keys():
    keys_dir = Path(__file__).parent.parent / "keys"
    keys_dir.mkdir(exist_ok=True)

    private_key_path = keys_dir / "private.pem"
    public_key_path = keys_dir / "public.pem"

    if private_key_path.exists():
        print(f"Keys already exist in {keys_dir}")
        response = input("Regenerate them? (y/N): ").strip().lower()
        if response != "y":
            print("Cancelled.")
            return

    private_key = rsa.generate_private_key(
        public_exponent=65537,
        key_size=2048,
    )

    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    private_key_path.write_bytes(private_pem)
    print(f"Private key written: {private_key_path}")

    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    public_key_path.write_bytes(public_pem)
    print(f"Public key written: {public_key_path}")

    print("\nAdd the key paths to your .env:")
    print("   JWT_PRIVATE_KEY_PATH=./keys/private.pem")
    print("   JWT_PUBLIC_KEY_PATH=./keys/public.pem")


if __name__ == "__main__":
    generate_rsa_keys()
