#!/usr/bin/env python3
"""
Remove local runtime data: Python caches, SQLite databases, logs and uploaded signatures
"""

from pathlib import Path
import shutil


def _remove_matching(root, pattern, label):
    count = 0
    for path in root.rglob(pattern):
        if 'venv' in path.parts or '.venv' in path.parts:
            continue
        try:
            if path.is_dir():
                shutil.rmtree(path)
            else:
                path.unlink()
            print(f"   ✓ Removed: {path}")
            count += 1
        except OSError as e:
            print(f"   ✗ Failed to remove {path}: {e}")
    print(f"   Total {label} removed: {count}")
    return count


def clear_data():
    root = Path(__file__).parent
    print("=== Cleaning up caches, databases, logs and signatures ===")
    print(f"Cleaning directory: {root}")

    counts = {}
    print("\n1. Removing __pycache__ directories...")
    counts['__pycache__ directories'] = _remove_matching(root, '__pycache__', '__pycache__ directories')

    print("\n2. Removing .db files...")
    counts['.db files'] = _remove_matching(root, '*.db', '.db files')

    print("\n3. Removing .log files...")
    counts['.log files'] = _remove_matching(root, '*.log', '.log files')

    print("\n4. Removing uploaded signatures...")
    signatures = root / 'uploads' / 'signatures'
    counts['signature files'] = _remove_matching(signatures, '*-signature.*', 'signature files') \
        if signatures.exists() else 0

    print("\n=== Cleanup Complete ===")
    for label, count in counts.items():
        print(f"  - {label}: {count}")
    return sum(counts.values())


if __name__ == '__main__':
    clear_data()
