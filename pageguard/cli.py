import argparse
import json
import sys
from pathlib import Path

from pageguard.config import settings
from pageguard.core.domain_utils import normalize_trusted_domains
from pageguard.core.risk_scorer import assess


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="pageguard",
        description="Score captured page snapshots (JSON) for phishing risk.",
    )
    parser.add_argument("paths", nargs="+", help="Snapshot JSON files")
    parser.add_argument(
        "-t", "--trusted",
        action="append",
        help="Trusted domain (repeatable). Defaults to DEFAULT_TRUSTED_DOMAINS.",
    )
    parser.add_argument("-o", "--output", help="Write the JSON report to a file instead of stdout")
    args = parser.parse_args(argv)

    trusted = normalize_trusted_domains(args.trusted or settings.DEFAULT_TRUSTED_DOMAINS)

    results = []
    errors = 0
    for p in args.paths:
        path = Path(p)
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            errors += 1
            print(f"Error reading {path}: {e}", file=sys.stderr)
            continue
        result = assess(payload, trusted)
        results.append({"file": str(path), **result.model_dump(mode="json", by_alias=True)})

    output = json.dumps({"trustedDomains": list(trusted), "results": results}, indent=2, ensure_ascii=False)
    if args.output:
        Path(args.output).write_text(output + "\n", encoding="utf-8")
        print(f"Report written to {args.output}", file=sys.stderr)
    else:
        print(output)

    return 1 if errors else 0


if __name__ == "__main__":
    sys.exit(main())
