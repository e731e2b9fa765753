class BettingError(Exception):
    """Base de los errores del motor de apuestas."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(BettingError):
    """Handicap, stroke index, score o configuración fuera de rango."""

    pass


class IncompleteData(BettingError):
    """Se pidió liquidar un hoyo sin todas las tarjetas apuntadas."""

    def __init__(self, message: str, missing: list[tuple[str, int]] | None = None):
        super().__init__(message)
        self.missing = missing or []


class IncompleteRound(IncompleteData):
    """Liquidación final de una vuelta a la que le faltan scores."""

    pass
