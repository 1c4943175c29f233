"""
Keep the log category enum and its call sites in step.

Reports Cat.X references with no matching member, and members that
nothing under the package references any more.
"""
from __future__ import annotations

import ast
import sys
from pathlib import Path

Location = tuple[Path, int]


def _cat_members(module: ast.Module) -> set[str]:
    for node in module.body:
        if isinstance(node, ast.ClassDef) and node.name == "Cat":
            return {
                t.id
                for stmt in node.body
                if isinstance(stmt, ast.Assign)
                for t in stmt.targets
                if isinstance(t, ast.Name)
            }
    return set()


def _cat_references(path: Path) -> list[tuple[str, int]]:
    module = ast.parse(path.read_text(encoding="utf-8"))
    return [
        (node.attr, node.lineno)
        for node in ast.walk(module)
        if isinstance(node, ast.Attribute) and isinstance(node.value, ast.Name) and node.value.id == "Cat"
    ]


def scan(root: Path, extra_roots: tuple[Path, ...] = ()) -> tuple[dict[str, list[Location]], set[str]]:
    """Return (undefined references -> locations, unused members)."""
    members = _cat_members(ast.parse((root / "instrumentation.py").read_text(encoding="utf-8")))
    used: dict[str, list[Location]] = {}
    for base in (root, *extra_roots):
        paths = [base] if base.is_file() else sorted(base.rglob("*.py"))
        for path in paths:
            for name, line in _cat_references(path):
                used.setdefault(name, []).append((path, line))

    undefined = {name: locs for name, locs in sorted(used.items()) if name not in members}
    return undefined, members - set(used)


def missing_cat_members(root: Path) -> dict[str, list[Location]]:
    return scan(root)[0]


def main(root: Path = Path("src/alpha_nav")) -> int:
    if not (root / "instrumentation.py").exists():
        print(f"ERROR: instrumentation.py not found under {root.as_posix()}")
        return 2

    # the CLI entry point lives one level up
    entry = root.parent / "main.py"
    undefined, unused = scan(root, extra_roots=(entry,) if entry.exists() else ())
    for name, locs in undefined.items():
        for path, line in locs:
            print(f"undefined Cat.{name}: {path.as_posix()}:{line}")
    for name in sorted(unused):
        print(f"unused Cat.{name}")

    if undefined:
        return 1
    print("OK: every Cat reference is defined.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(Path(sys.argv[1]) if len(sys.argv) > 1 else Path("src/alpha_nav")))
