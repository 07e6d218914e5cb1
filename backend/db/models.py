"""SQLAlchemy models over the backend's collections (French table and column names)."""
from __future__ import annotations

from datetime import datetime
from sqlalchemy import Boolean, Column, Date, DateTime, Float, ForeignKey, Integer, JSON, String, Text
from sqlalchemy.orm import relationship

from .session import Base


class Bailleur(Base):
    __tablename__ = "bailleurs"

    id = Column(String, primary_key=True)
    prenom = Column(String, nullable=True)
    nom = Column(String, nullable=True)
    taux_honoraires = Column("taux_honoraires", Float, nullable=True)
    actif = Column(Boolean, nullable=False, default=True)
    piece_identite = Column("piece_identite", String, nullable=True)
    adresse = Column(Text, nullable=True)
    bien_adresse = Column("bien_adresse", Text, nullable=True)
    bien_composition = Column("bien_composition", Text, nullable=True)
    date_debut = Column("date_debut", Date, nullable=True)
    duree_annees = Column("duree_annees", Float, nullable=True)
    created_at = Column("created_at", DateTime, default=datetime.utcnow)

    immeubles = relationship("Immeuble", back_populates="bailleur")


class Immeuble(Base):
    __tablename__ = "immeubles"

    id = Column(String, primary_key=True)
    nom = Column(String, nullable=False)
    bailleur_id = Column("bailleur_id", String, ForeignKey("bailleurs.id", ondelete="SET NULL"), nullable=True)
    nombre_unites = Column("nombre_unites", Integer, nullable=True)
    adresse = Column(Text, nullable=True)
    actif = Column(Boolean, nullable=False, default=True)
    created_at = Column("created_at", DateTime, default=datetime.utcnow)

    bailleur = relationship("Bailleur", back_populates="immeubles")
    unites = relationship("Unite", back_populates="immeuble")


class Unite(Base):
    __tablename__ = "unites"

    id = Column(String, primary_key=True)
    nom = Column(String, nullable=False)
    immeuble_id = Column("immeuble_id", String, ForeignKey("immeubles.id", ondelete="SET NULL"), nullable=True)
    loyer_base = Column("loyer_base", Float, nullable=True)
    statut = Column(String, nullable=False, default="libre")
    created_at = Column("created_at", DateTime, default=datetime.utcnow)

    immeuble = relationship("Immeuble", back_populates="unites")


class Locataire(Base):
    __tablename__ = "locataires"

    id = Column(String, primary_key=True)
    prenom = Column(String, nullable=True)
    nom = Column(String, nullable=True)
    piece_identite = Column("piece_identite", String, nullable=True)
    adresse_personnelle = Column("adresse_personnelle", Text, nullable=True)
    telephone = Column(String, nullable=True)
    created_at = Column("created_at", DateTime, default=datetime.utcnow)


class Contrat(Base):
    __tablename__ = "contrats"

    id = Column(String, primary_key=True)
    locataire_id = Column("locataire_id", String, ForeignKey("locataires.id", ondelete="SET NULL"), nullable=True)
    unite_id = Column("unite_id", String, ForeignKey("unites.id", ondelete="SET NULL"), nullable=True)
    date_debut = Column("date_debut", Date, nullable=True)
    date_fin = Column("date_fin", Date, nullable=True)
    loyer_mensuel = Column("loyer_mensuel", Float, nullable=False, default=0.0)
    caution = Column(Float, nullable=True)
    pourcentage_agence = Column("pourcentage_agence", Float, nullable=True)
    statut = Column(String, nullable=False, default="actif")
    created_at = Column("created_at", DateTime, default=datetime.utcnow)


class Paiement(Base):
    __tablename__ = "paiements"

    id = Column(String, primary_key=True)
    contrat_id = Column("contrat_id", String, ForeignKey("contrats.id", ondelete="SET NULL"), nullable=True)
    montant_total = Column("montant_total", Float, nullable=False)
    part_agence = Column("part_agence", Float, nullable=False, default=0.0)
    part_bailleur = Column("part_bailleur", Float, nullable=False, default=0.0)
    mois_concerne = Column("mois_concerne", Date, nullable=False)
    date_paiement = Column("date_paiement", Date, nullable=True)
    mode_paiement = Column("mode_paiement", String, nullable=True)
    statut = Column(String, nullable=False, default="paye")
    reference = Column(String, nullable=True)
    created_at = Column("created_at", DateTime, default=datetime.utcnow)


class Depense(Base):
    __tablename__ = "depenses"

    id = Column(String, primary_key=True)
    montant = Column(Float, nullable=False)
    date_depense = Column("date_depense", Date, nullable=False)
    categorie = Column(String, nullable=True)
    immeuble_id = Column("immeuble_id", String, ForeignKey("immeubles.id", ondelete="SET NULL"), nullable=True)
    created_at = Column("created_at", DateTime, default=datetime.utcnow)


class Revenu(Base):
    __tablename__ = "revenus"

    id = Column(String, primary_key=True)
    montant = Column(Float, nullable=False)
    date_revenu = Column("date_revenu", Date, nullable=False)
    libelle = Column(String, nullable=True)
    created_at = Column("created_at", DateTime, default=datetime.utcnow)


class AuditLog(Base):
    __tablename__ = "audit_log"

    id = Column(String, primary_key=True)
    actor_id = Column("actor_id", String, nullable=False)
    action = Column(String, nullable=False)
    resource_type = Column("resource_type", String, nullable=False)
    resource_id = Column("resource_id", String, nullable=True)
    details = Column(JSON, nullable=True)
    created_at = Column("created_at", DateTime, default=datetime.utcnow)
