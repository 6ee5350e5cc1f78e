#!/usr/bin/env python3
"""
Example usage of SQLON.

This script converts a small nested JSON document to SQLON and to a
SQLite dump, then runs the full roundtrip pipeline and shows its step log.
"""

import json
import tempfile
from pathlib import Path

from sqlon import SQLONConverter


def main():
    """Main example function."""
    print("SQLON Example")
    print("=" * 50)

    sample_data = {
        "library": "Central",
        "founded": 1921,
        "books": [
            {
                "id": 1,
                "title": "Dune",
                "rating": 4.5,
                "authors": ["Frank Herbert"],
                "loans": [{"member": "ann", "returned": True}, {"member": "bob", "returned": False}]
            },
            {
                "id": 2,
                "title": "Solaris",
                "rating": 4.25,
                "authors": ["Stanisław Lem", "Bill Johnston"],
                "loans": []
            }
        ],
        "address": {"city": "Springfield", "zip": "12345"}
    }

    converter = SQLONConverter()

    print("\n📋 SQLON")
    print("-" * 50)
    sqlon = converter.json_to_sqlon(json.dumps(sample_data))
    if not sqlon.success:
        print(f"❌ Conversion failed: {sqlon.errors}")
        return
    print(sqlon.output)
    print(f"Tables: {sqlon.table_count}")

    print("\n🗄️  SQL")
    print("-" * 50)
    sql = converter.sqlon_to_sql(sqlon.output)
    print(sql.output)

    print("\n🔁 Roundtrip pipeline")
    print("-" * 50)
    with tempfile.TemporaryDirectory() as temp_dir:
        input_path = Path(temp_dir) / "library.json"
        input_path.write_text(json.dumps(sample_data), encoding="utf-8")

        result = converter.roundtrip(input_path, Path(temp_dir) / "out")
        if not result.success:
            print(f"❌ Roundtrip failed: {result.errors}")
            return

        for artifact in result.artifacts[:-1]:
            print(f"✅ {Path(artifact).name}")

        print("\n📄 Step log:")
        for line in Path(result.artifacts[-1]).read_text(encoding="utf-8").splitlines():
            record = json.loads(line)
            print(f"   {record['step']:<22} {record['in_bytes']:>6} -> {record['out_bytes']:>6} bytes "
                  f"({record['duration_ms']:.1f} ms)")

        # One-element arrays come back as bare values
        print(f"\nAuthors of Dune after the roundtrip: {json.loads(result.output)['books'][0]['authors']}")

    summary = converter.profiler.get_performance_summary()
    print(f"\n⏱️  Profiled {summary['total_operations']} steps "
          f"in {summary.get('total_duration', 0) * 1000:.1f} ms")


if __name__ == "__main__":
    main()
