"""Edit services.yaml in memory and show exactly which lines change."""

from __future__ import annotations

import difflib
import pathlib
import sys

import yamlrt

HERE = pathlib.Path(__file__).resolve().parent


def _apply_edits(document: yamlrt.YamlDocument) -> None:
    document.set("Port", 9090)
    document.set("Database.Pool.max", 25)
    document.set_comment("Database.Host", "moved in March")
    document.set(
        "Services[2]",
        {"ServiceName": "AuditService", "Host": "audit.internal", "Port": 9003},
    )
    document.add_blank_line_before("Services[2]")
    document.remove("Features.Empty")


def main() -> int:
    source = HERE / "services.yaml"
    original = source.read_text(encoding="utf-8")
    document = yamlrt.YamlDocument.loads(original)

    if document.dumps() != original:
        print("round trip is not exact", file=sys.stderr)
        return 1

    _apply_edits(document)
    diff = difflib.unified_diff(
        original.splitlines(keepends=True),
        document.dumps().splitlines(keepends=True),
        fromfile="services.yaml",
        tofile="services.yaml (edited)",
    )
    sys.stdout.writelines(diff)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
