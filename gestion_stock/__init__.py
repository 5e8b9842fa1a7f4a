"""Gestion de stock: articles, registre de stock et journal des mouvements."""
