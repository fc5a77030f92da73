"""Plugin package initialiser.

Keep this file lightweight; concrete plugins (``logging``, ``dispatch``)
self-register when imported (see ``smartnav.__init__`` for eager imports).
"""

__all__: list[str] = []
