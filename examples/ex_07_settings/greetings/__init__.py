"""Greeting components scanned by ``01_settings.py``."""


class Greeting:
    def text(self) -> str:
        raise NotImplementedError
