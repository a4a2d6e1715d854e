"""
Demo: tokenize a user's protected fields, then read them back.

Needs a tokenization server (TOKENVAULT_URL) and an application backend
that issues credentials (TOKENVAULT_BACKEND_URL).
"""

import argparse
import json
import logging
import sys

from tokenvault.client import Client
from tokenvault.common.config import load_env
from tokenvault.credentials import CredentialSource

# protection_id -> value
PROTECTIONS = {
    "5f77f9c2-2800-4661-b479-a0791aa0eacc": "alice@example.com",
    "6980a205-db7a-4b8e-bfce-551709034cc3": "INDONESIA",
    "963d8305-f68c-4f9a-b6b4-d568fc3d8f78": "1234123412341234",
    "0c392d3c-4ec0-4e11-a5bc-d6e094c21ea0": "123-456-7890",
}


def main(argv=None):
    parser = argparse.ArgumentParser()
    parser.add_argument("--ttl", type=int, default=1, help="Credential TTL (minutes)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    service_config, backend_config = load_env()
    print(f"[CONFIG] tokenization server {service_config.base_url}, backend {backend_config.base_url}")

    ids = list(PROTECTIONS)
    credentials = CredentialSource(backend_config)
    with Client(service_config) as client:
        try:
            write_cred = credentials.request("protection", "WRITE", ids, ttl=args.ttl)
            stored = client.secure_protection_send(write_cred, [[PROTECTIONS[i]] for i in ids])
            print("[STORE] tokens:")
            print(json.dumps(stored, indent=2))

            read_cred = credentials.request("protection", "READ", ids, ttl=args.ttl)
            fetched = client.secure_protection_receive(read_cred, stored["tokens"])
            print("[FETCH] values:")
            print(json.dumps(fetched, indent=2))
        finally:
            credentials.close()


if __name__ == "__main__":
    main(sys.argv[1:])
