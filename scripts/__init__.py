"""# Scripts

This directory contains database seeding and lab validation scripts.

## Scripts

| Script | Purpose |
|--------|---------|
| `check_connection.py` | Verifies connectivity, replica set and read/write access |
| `seed_labs.py` | Seeds the course databases from `data/` |
| `validate_labs.py` | Runs every lab step and prints the readiness report |
| `repair_relationships.py` | Fixes claims pointing at missing policies/customers |
| `seed_all.py` | Orchestrates check, seed and validation |

## Usage

```bash
# Full setup
seed-all

# Individual steps
check-connection
seed-labs --reset
validate-labs --lab Lab3 --lab Lab7

# Maintenance
repair-relationships --dry-run
```
"""
