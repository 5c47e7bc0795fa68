"""Exception types raised while decoding Saleae exports."""


class SaleaeParseError(ValueError):
    """
    Raised when a Saleae capture cannot be decoded.

    Every instance aborts the current import. Events emitted before the
    failure stay in the sink; nothing is rolled back.
    """
