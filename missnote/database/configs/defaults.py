#!/usr/bin/env python3
"""
defaults.py
-----------

Default values used when seeding a new database and when filling columns
that older databases left empty.
"""
from typing import List

# Subjects seeded on every startup (insert-if-absent)
DEFAULT_SUBJECTS: List[str] = ["国語", "数学", "英語", "物理", "化学"]

# Subject assigned to mistakes saved without one
DEFAULT_SUBJECT: str = "英語"

# Mid importance
DEFAULT_IMPORTANCE: int = 2
