"""
Fehlerklassen fuer den Stundensaldo.

Jede Klasse traegt einen Fehlercode und den passenden HTTP-Status,
damit Views die Fehler direkt als JSON beantworten koennen.
"""


class SaldoFehler(Exception):
    """Basisklasse aller fachlichen Fehler."""

    code = "internal"
    status = 500

    def __init__(self, message="", code=None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code

    def als_dict(self):
        return {"code": self.code, "message": self.message}


class UngueltigesArgument(SaldoFehler):
    code = "invalid-argument"
    status = 400


class NichtAngemeldet(SaldoFehler):
    code = "unauthenticated"
    status = 401


class KeineBerechtigung(SaldoFehler):
    code = "permission-denied"
    status = 403


class NichtGefunden(SaldoFehler):
    code = "not-found"
    status = 404


class InternerFehler(SaldoFehler):
    code = "internal"
    status = 500
