from sqlalchemy.orm import sessionmaker

from catalogdb import seed as seed_module
from catalogdb.db.base import Base
from catalogdb.db.crud import AuthorCRUD, BookCRUD, CategoryCRUD
from catalogdb.db.session import make_engine


def test_seed_is_idempotent(monkeypatch):
    engine = make_engine("sqlite://")
    Base.metadata.create_all(engine)
    monkeypatch.setattr(seed_module, "SessionLocal", sessionmaker(bind=engine))

    seed_module.seed()
    seed_module.seed()

    with sessionmaker(bind=engine)() as db:
        assert BookCRUD.count(db) == len(seed_module.BOOKS)
        assert AuthorCRUD.count(db) == len(seed_module.AUTHORS)
        assert CategoryCRUD.count(db) == len(seed_module.CATEGORIES)
        assert CategoryCRUD.get_by_slug(db, "dystopian").parent.slug == "fiction"
    engine.dispose()
