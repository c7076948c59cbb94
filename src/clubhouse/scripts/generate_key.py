"""Print a fresh base64 AES-256 key for CLUBHOUSE_ENCRYPTION_KEY."""

from clubhouse.engine.cipher import generate_key


def main() -> None:
    print(generate_key())


if __name__ == "__main__":
    main()
