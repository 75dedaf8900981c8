#!/usr/bin/env python3
"""Testhelper CLI for pasetolite interoperability testing.

Keys travel as the JSON export format on stdin/stdout, so tokens can be
exchanged with other implementations of the same protocol.
"""

import asyncio
import json
import sys

from pasetolite import ExportedKey, PasetoError, Provider, create_provider


def read_key(data: dict) -> Provider:
    """Build a provider from an exported key in camelCase JSON form."""
    key = data["key"]
    exported = ExportedKey(
        version=key["version"],
        protocol=key["protocol"],
        private_key=key.get("privateKey"),
        public_key=key.get("publicKey"),
        exported_at=key.get("exportedAt", ""),
    )
    return Provider.import_key(exported)


async def generate_key(version: str, purpose: str) -> None:
    """Generate a key and output export JSON."""
    provider = create_provider(version, purpose)
    await provider.generate_key()
    exported = provider.export_key()
    output = {
        "version": exported.version,
        "protocol": exported.protocol,
        "privateKey": exported.private_key,
        "publicKey": exported.public_key,
        "exportedAt": exported.exported_at,
    }
    print(json.dumps(output))


async def issue(data: dict) -> None:
    """Sign or encrypt the message from stdin JSON."""
    provider = read_key(data)
    footer = data.get("footer", "")
    if provider.purpose == "public":
        token = await provider.sign(data["message"], footer)
    else:
        token = await provider.encrypt(data["message"], footer)
    print(json.dumps({"token": token}))


async def check(data: dict) -> None:
    """Verify or decrypt the token from stdin JSON."""
    provider = read_key(data)
    try:
        if provider.purpose == "public":
            verified = await provider.verify(data["token"])
        else:
            verified = await provider.decrypt(data["token"])
    except PasetoError as e:
        print(json.dumps({"valid": False, "error": type(e).__name__}))
        return
    print(json.dumps({"valid": True, "message": verified.message, "footer": verified.footer}))


async def main() -> None:
    """Main entry point."""
    if len(sys.argv) < 2:
        print("usage: testhelper.py <command> [args]", file=sys.stderr)
        sys.exit(1)

    command = sys.argv[1]

    if command == "generate-key":
        if len(sys.argv) < 3 or sys.argv[2].count(".") != 1:
            print("usage: testhelper.py generate-key <version.purpose>", file=sys.stderr)
            sys.exit(1)
        version, purpose = sys.argv[2].split(".")
        await generate_key(version, purpose)
    elif command == "issue":
        await issue(json.loads(sys.stdin.read()))
    elif command == "check":
        await check(json.loads(sys.stdin.read()))
    else:
        print(f"unknown command: {command}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
