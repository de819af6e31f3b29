from audiolib.cli.commands import app

__all__ = ["app"]
