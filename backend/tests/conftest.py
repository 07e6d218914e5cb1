"""Add backend to path so modules resolve 'from models import' when run from project root."""
import os
import sys
from datetime import date

import pytest

_backend_dir = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if _backend_dir not in sys.path:
    sys.path.insert(0, _backend_dir)

# db.session builds its engine at import; keep tests off Postgres.
os.environ.setdefault("DATABASE_URL", "sqlite://")

from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from db.models import Bailleur, Contrat, Depense, Immeuble, Locataire, Paiement, Revenu, Unite  # noqa: E402
from db.session import Base, get_db  # noqa: E402


def _seed(db) -> None:
    db.add_all([
        Bailleur(id="b1", prenom="Awa", nom="Diop", taux_honoraires=10.0, actif=True,
                 piece_identite="1234567890", adresse="Sacré-Coeur 3, Dakar",
                 bien_adresse="Rue 10, Mermoz", bien_composition="Immeuble R+2, 2 appartements"),
        Bailleur(id="b2", prenom="Moussa", nom="Fall", taux_honoraires=8.0, actif=True),
        Immeuble(id="i1", nom="Résidence Les Palmiers", bailleur_id="b1", nombre_unites=2,
                 adresse="Rue 10, Mermoz, Dakar", actif=True),
        Immeuble(id="i2", nom="Immeuble Soleil", bailleur_id="b2", nombre_unites=1, adresse="Ouakam", actif=True),
        Immeuble(id="i3", nom="Ancien Dépôt", bailleur_id="b2", nombre_unites=0, actif=False),
        Unite(id="u1", nom="Appartement A1", immeuble_id="i1", loyer_base=100000, statut="loue"),
        Unite(id="u2", nom="Appartement A2", immeuble_id="i1", loyer_base=90000, statut="libre"),
        Unite(id="u3", nom="Studio S1", immeuble_id="i2", loyer_base=100000, statut="loue"),
        Locataire(id="t1", prenom="Fatou", nom="Ndiaye", piece_identite="CNI-001",
                  adresse_personnelle="Liberté 6, Dakar"),
        Locataire(id="t2", prenom="Ibrahima", nom="Sarr"),
        Contrat(id="c1", locataire_id="t1", unite_id="u1", date_debut=date(2024, 1, 1), date_fin=date(2026, 1, 1),
                loyer_mensuel=100000, caution=200000, pourcentage_agence=10.0, statut="actif"),
        Contrat(id="c2", locataire_id="t2", unite_id="u3", date_debut=date(2024, 6, 1),
                loyer_mensuel=100000, statut="actif"),
        # No unit: payments on this contract have no building lineage.
        Contrat(id="c3", locataire_id="t2", unite_id=None, loyer_mensuel=50000, statut="actif"),
    ])
    db.flush()
    db.add_all([
        Paiement(id="a1b2c3d4-0000-0000-0000-000000000001", contrat_id="c1", montant_total=100000,
                 part_agence=10000, part_bailleur=90000, mois_concerne=date(2025, 3, 1),
                 date_paiement=date(2025, 3, 5), statut="paye"),
        Paiement(id="p2", contrat_id="c2", montant_total=100000, part_agence=10000, part_bailleur=90000,
                 mois_concerne=date(2025, 3, 1), date_paiement=date(2025, 3, 6), statut="paye"),
        Paiement(id="p3", contrat_id="c3", montant_total=50000, part_agence=5000, part_bailleur=45000,
                 mois_concerne=date(2025, 3, 1), statut="impaye"),
        Paiement(id="p4", contrat_id="c1", montant_total=100000, part_agence=10000, part_bailleur=90000,
                 mois_concerne=date(2025, 4, 1), date_paiement=date(2025, 4, 3), statut="paye"),
        Depense(id="d1", montant=5000, date_depense=date(2025, 3, 10), categorie="entretien", immeuble_id="i1"),
        Depense(id="d2", montant=7000, date_depense=date(2025, 4, 1), categorie="fournitures"),
        Revenu(id="r1", montant=15000, date_revenu=date(2025, 3, 20), libelle="Frais de dossier"),
    ])
    db.commit()


@pytest.fixture
def session_factory():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = factory()
    try:
        _seed(db)
    finally:
        db.close()
    yield factory
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    from fastapi.testclient import TestClient
    from main import app

    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.pop(get_db, None)
