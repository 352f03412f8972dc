#!/usr/bin/env python3
"""
Validate three-layer architecture dependencies.

Rules:
- c1 (models, enums, session) imports no c2 or c3 package
- c2 (services) imports c1 and shared packages, never c3
- c3 (routes) may import c1 and c2

Shared packages (src.core, src.auth, src.api) are not layered.
"""

import ast
import sys
from pathlib import Path
from typing import List, Optional, Tuple

LAYER_PREFIXES = ("c1_", "c2_", "c3_")
FORBIDDEN = {
    "c1": {"c2", "c3"},
    "c2": {"c3"},
}


def extract_imports(file_path: Path) -> List[str]:
    """Extract all project imports (``src.*`` or bare ``cN_*``) from a Python file."""
    try:
        tree = ast.parse(file_path.read_text(encoding="utf-8"), filename=str(file_path))
    except SyntaxError as e:
        print(f"⚠️  Syntax error in {file_path}: {e}")
        return []

    modules = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            modules.extend(alias.name for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.module and node.level == 0:
            modules.append(node.module)

    return [m for m in modules if m.startswith("src.") or m.startswith(LAYER_PREFIXES)]


def get_layer(package_name: str) -> Optional[str]:
    """Layer of a top-level package name, None for shared packages."""
    if package_name.startswith(LAYER_PREFIXES):
        return package_name[:2]
    return None


def layer_of_module(module: str) -> Optional[str]:
    parts = module.split(".")
    if parts[0] == "src":
        parts = parts[1:]
    return get_layer(parts[0]) if parts else None


def validate_layer_dependencies(src_dir: Path = Path("src")) -> Tuple[bool, List[str]]:
    """Validate that layer dependencies follow the rules."""
    violations = []

    if not src_dir.exists():
        print(f"✅ No {src_dir}/ directory found")
        return True, []

    for py_file in sorted(src_dir.rglob("*.py")):
        package_parts = py_file.relative_to(src_dir).parts
        if len(package_parts) < 2:
            continue

        file_layer = get_layer(package_parts[0])
        if file_layer is None:
            continue

        for imported_module in extract_imports(py_file):
            imported_layer = layer_of_module(imported_module)
            if imported_layer in FORBIDDEN.get(file_layer, set()):
                violations.append(
                    f"{py_file}: {file_layer} cannot import from {imported_layer} ({imported_module})"
                )

    return len(violations) == 0, violations


def main():
    """Run architecture validation."""
    print("=" * 70)
    print("Three-Layer Architecture Validator")
    print("=" * 70)
    print()

    src_dir = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("src")
    success, violations = validate_layer_dependencies(src_dir)

    if success:
        print("✅ All layer dependencies are valid!")
        print()
        print("Layer rules:")
        print("  - c1 imports: shared packages + external packages")
        print("  - c2 imports: c1 + shared packages + external packages")
        print("  - c3 imports: c1 + c2 + shared packages + external packages")
        return 0

    print(f"❌ Found {len(violations)} layer dependency violations:")
    print()
    for violation in violations:
        print(f"  - {violation}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
