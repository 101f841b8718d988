"""
Compute dashboard analytics from a saved Firestore list response.

Usage:
    python3 scripts/analytics_snapshot.py contacts.json
    python3 scripts/analytics_snapshot.py contacts.json --policy recency --tz Europe/London

The input is the JSON body returned by
GET .../documents/contacts (a {"documents": [...]} object).
"""

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

from portal.models.contact import PatientTypePolicy, RawDocument
from portal.services.dashboard.analytics import calculate_analytics
from portal.services.dashboard.normalizer import normalize_documents


def load_documents(path: Path) -> list[RawDocument]:
    data = json.loads(path.read_text(encoding="utf-8"))
    return [
        RawDocument(
            name=doc.get("name") or "",
            fields=doc.get("fields") or {},
            create_time=doc.get("createTime"),
            update_time=doc.get("updateTime"),
        )
        for doc in data.get("documents") or []
    ]


def main() -> None:
    parser = argparse.ArgumentParser(description="Dashboard analytics for a Firestore export")
    parser.add_argument("input", type=Path, help="Saved Firestore list response (JSON)")
    parser.add_argument(
        "--policy",
        choices=[p.value for p in PatientTypePolicy],
        default=PatientTypePolicy.EXPLICIT.value,
        help="Patient type policy (default: explicit)",
    )
    parser.add_argument("--tz", default="UTC", help="IANA timezone for 'today' (default: UTC)")
    args = parser.parse_args()

    tz = ZoneInfo(args.tz)
    now = datetime.now(tz)
    policy = PatientTypePolicy(args.policy)

    contacts = normalize_documents(load_documents(args.input), policy=policy, now=now, tz=tz)
    analytics = calculate_analytics(contacts, now, policy=policy)

    json.dump(analytics.model_dump(mode="json", by_alias=True), sys.stdout, indent=2)
    print()


if __name__ == "__main__":
    main()
