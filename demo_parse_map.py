#!/usr/bin/env python3
"""
Pipeline Demo: DSL text → Canonical Wardley Map → Resolution report

Shows the full workflow:
1. Parse the built-in example map (or a map file given as argument)
2. Inspect the canonical collections and diagnostics
3. Resolve positions and links the way a renderer would
4. Dump the canonical map as YAML
"""

import sys

from cwm.examples import EXAMPLE_MAP
from cwm.parser import parse, parse_file
from cwm.resolution import analyze_map, resolve_links
from cwm.serialization import map_to_yaml


def main():
    print("=" * 80)
    print("PIPELINE DEMO: DSL → Canonical Map → Resolution")
    print("=" * 80)

    # =========================================================================
    # STEP 1: Parse
    # =========================================================================
    print("\n1. PARSING MAP...")
    if len(sys.argv) > 1:
        wardley_map = parse_file(sys.argv[1])
    else:
        wardley_map = parse(EXAMPLE_MAP)
    print(f"   ✓ Title: {wardley_map.title}")
    print(f"   ✓ Components: {len(wardley_map.components)}")
    print(f"   ✓ Anchors: {len(wardley_map.anchors)}")
    print(f"   ✓ Markets: {len(wardley_map.markets)}")
    print(f"   ✓ Pipelines: {len(wardley_map.pipelines)}")
    print(f"   ✓ Links: {len(wardley_map.links)}")

    if wardley_map.errors:
        print(f"\n   Diagnostics ({len(wardley_map.errors)}):")
        for diagnostic in wardley_map.errors:
            print(f"      - line {diagnostic.line}: {diagnostic.message}")

    # =========================================================================
    # STEP 2: Resolve
    # =========================================================================
    print("\n2. RESOLVING REFERENCES...")
    report = analyze_map(wardley_map)
    resolved = resolve_links(wardley_map)
    print(f"   ✓ Drawable links: {len(resolved)} of {report.total_links}")
    for warning in report.warnings:
        print(f"      - {warning}")

    # =========================================================================
    # STEP 3: Sample Output
    # =========================================================================
    print("\n3. SAMPLE YAML OUTPUT:")
    print("-" * 80)
    lines = map_to_yaml(wardley_map).split('\n')
    for line in lines[:20]:
        print(f"   {line}")
    if len(lines) > 20:
        print(f"   ... ({len(lines) - 20} more lines)")

    print("\n" + "=" * 80)


if __name__ == "__main__":
    main()
