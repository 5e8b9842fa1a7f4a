"""
Exceptions spécifiques au module fournisseurs.
"""

class FournisseurException(Exception):
    """Classe de base pour les exceptions du module fournisseurs."""
    pass


class FournisseurNotFoundException(FournisseurException):
    """Exception levée lorsqu'un fournisseur n'est pas trouvé."""

    def __init__(self, fournisseur_id: int):
        self.fournisseur_id = fournisseur_id
        super().__init__(f"Fournisseur non trouvé avec l'ID {fournisseur_id}")


class DuplicateFournisseurCodeException(FournisseurException):
    """Exception levée lorsqu'un code fournisseur est déjà utilisé."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Le code {code} est déjà utilisé par un autre fournisseur")
