import os
import re
import sys
import json
import argparse

from dotenv import load_dotenv

# Ensure package imports work
sys.path.append(os.getcwd())

from apps.api.core.auth import TenantContext, get_service_client
from apps.api.domains.transactions.service import extract_transaction
from packages.ingestion_engine.text_parser import parse_transaction_text

# Load env
load_dotenv()

BLOCK_SEPARATOR = re.compile(r"\n\s*\n")


def split_blocks(content: str) -> list[str]:
    """One transaction per blank-line separated block."""
    return [block.strip() for block in BLOCK_SEPARATOR.split(content) if block.strip()]


def import_file(file_path: str, organization_id: str, user_id: str, dry_run: bool = False) -> int:
    print(f"📂 Reading file: {file_path}")
    with open(file_path, encoding="utf-8") as f:
        blocks = split_blocks(f.read())

    if not blocks:
        print("⚠️ No transaction text found.")
        return 0

    if dry_run:
        for block in blocks:
            print(json.dumps(parse_transaction_text(block).to_dict(), ensure_ascii=False))
        print(f"✅ Parsed {len(blocks)} blocks (dry run, nothing stored)")
        return len(blocks)

    client = get_service_client()
    context = TenantContext(user_id=user_id, organization_id=organization_id)

    print(f"🚀 Inserting {len(blocks)} transactions for organization {organization_id}...")
    stored = 0
    for index, block in enumerate(blocks, start=1):
        try:
            result = extract_transaction(client, block, context)
        except Exception as e:
            print(f"❌ Block {index} failed: {e}")
            continue
        tx = result["transaction"]
        print(f"   {tx['date']} {tx['type']:<6} {tx['amount']:>12.2f}  {tx['description']} ({tx['confidence']})")
        stored += 1

    print(f"✅ Stored {stored}/{len(blocks)} transactions")
    return stored


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Import free-text transactions")
    parser.add_argument("file", help="Text file; blank lines separate transactions")
    parser.add_argument("--organization_id", required=True, help="Tenant the rows belong to")
    parser.add_argument("--user_id", required=True, help="User recorded as the creator")
    parser.add_argument("--dry-run", action="store_true", help="Parse and print only")

    args = parser.parse_args()

    if not os.path.exists(args.file):
        print(f"❌ File not found: {args.file}")
        sys.exit(1)

    import_file(args.file, args.organization_id, args.user_id, dry_run=args.dry_run)
