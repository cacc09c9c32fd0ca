from __future__ import annotations

import argparse
import json
import os
from dataclasses import asdict
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from xmlcursor.audit import audit_counts


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Check count attributes of an XML file (streaming).")
    p.add_argument("--xml", default=os.getenv("XMLCURSOR_XML"), help="Path to XML file (default: $XMLCURSOR_XML)")
    p.add_argument("--max-issues", type=int, default=None, help="Stop after this many issues")
    p.add_argument("--out", default=None, help="Optional output JSON report path")
    args = p.parse_args(argv)
    if not args.xml:
        p.error("--xml is required (or define XMLCURSOR_XML in .env)")
    return args


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = parse_args(argv)
    xml_path = Path(args.xml)

    audit = audit_counts(xml_path, max_issues=args.max_issues)

    print("\n=== COUNT ATTRIBUTE REPORT ===")
    print(f"File: {xml_path}")
    print(f"Elements: {audit.elements_total}")
    print(f"Elements with count: {audit.counted_elements}")
    print(f"Issues: {len(audit.issues)}")
    for issue in audit.issues:
        if issue.error:
            print(f"  {issue.path:50s} {issue.error}")
        else:
            print(f"  {issue.path:50s} declared={issue.declared} actual={issue.actual}")

    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        report = asdict(audit)
        report["file"] = str(xml_path)
        out_path.write_text(json.dumps(report, ensure_ascii=False, indent=2), encoding="utf-8")
        print(f"\nSaved report: {out_path}")

    return 0 if audit.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
