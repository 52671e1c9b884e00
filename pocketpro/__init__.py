"""PocketPro: home game ledger and poker income tracker."""

__version__ = "0.1.0"
