"""Insert a small sample catalog. Safe to run repeatedly.

    python -m catalogdb.seed
"""

import logging
from decimal import Decimal

from catalogdb.db.crud import AuthorCRUD, BookCRUD, CategoryCRUD
from catalogdb.db.models import BookFormat
from catalogdb.db.session import SessionLocal

logger = logging.getLogger(__name__)

AUTHORS = ["George Orwell", "Aldous Huxley"]
CATEGORIES = [("Fiction", None), ("Dystopian", "fiction")]
BOOKS = [
    {
        "isbn13": "9780451524935",
        "title": "1984",
        "description": "A dystopian social science fiction novel.",
        "format": BookFormat.PAPERBACK,
        "price": Decimal("9.99"),
        "cover_image_url": "https://covers.openlibrary.org/b/isbn/9780451524935-L.jpg",
        "author": "George Orwell",
    },
    {
        "isbn13": "9780060850524",
        "title": "Brave New World",
        "description": "A futuristic World State of genetically modified citizens.",
        "format": BookFormat.HARDCOVER,
        "price": Decimal("14.50"),
        "cover_image_url": "https://covers.openlibrary.org/b/isbn/9780060850524-L.jpg",
        "author": "Aldous Huxley",
    },
]


def seed():
    with SessionLocal() as db:
        authors = {}
        for name in AUTHORS:
            authors[name] = AuthorCRUD.get_by_name(db, name) or AuthorCRUD.create(db, name=name)

        categories = {}
        for name, parent_slug in CATEGORIES:
            category = CategoryCRUD.get_by_slug(db, name.lower())
            if category is None:
                parent = categories.get(parent_slug)
                category = CategoryCRUD.create(db, name=name, parent_id=parent.id if parent else None)
            categories[category.slug] = category

        for entry in BOOKS:
            fields = dict(entry)
            author = authors[fields.pop("author")]
            if BookCRUD.find_duplicate(db, isbn13=fields["isbn13"]):
                continue
            BookCRUD.create(
                db,
                authors=[author],
                categories=[categories["dystopian"], categories["fiction"]],
                **fields,
            )
            logger.info("Seeded %s", fields["title"])
        db.commit()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    seed()
