#!/usr/bin/env python3
"""
Database configuration modules.

This package contains declarative configurations for database operations:
- defaults: Seeded subjects and fallback values for legacy rows
- backup_configs: Archive layout and table serialization for backups
"""
