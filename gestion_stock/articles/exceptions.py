"""
Exceptions spécifiques au module articles.
"""

class ArticleException(Exception):
    """Classe de base pour les exceptions du module articles."""
    pass


class ArticleNotFoundException(ArticleException):
    """Exception levée lorsqu'un article n'est pas trouvé."""

    def __init__(self, article_id: int = None, code: str = None):
        self.article_id = article_id
        self.code = code
        message = "Article non trouvé"
        if article_id is not None:
            message += f" avec l'ID {article_id}"
        if code:
            message += f" avec le code {code}"
        super().__init__(message)


class DuplicateArticleCodeException(ArticleException):
    """Exception levée lorsqu'un code article est déjà utilisé."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Le code {code} est déjà utilisé par un autre article")


class InvalidArticleDataException(ArticleException):
    """Exception levée lorsque les données d'un article sont invalides."""

    def __init__(self, message: str):
        super().__init__(f"Données d'article invalides: {message}")
