import sys
from pathlib import Path

from whatsfordinner.db import init_db, SessionLocal
from whatsfordinner.logging_setup import setup_logging
from whatsfordinner.recipes import import_recipes, load_recipes


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    setup_logging()
    init_db()
    default = Path(__file__).resolve().parents[1] / 'data' / 'recipes.json'
    p = Path(argv[0]) if argv else default
    if not p.exists():
        print(f'{p} not found')
        return
    db = SessionLocal()
    try:
        added = import_recipes(db, load_recipes(p))
    finally:
        db.close()
    print(f'Imported {added} recipes')


if __name__ == '__main__':
    main()
