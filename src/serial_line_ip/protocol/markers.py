"""SLIP frame marker bytes (RFC 1055).

Every literal ``END`` in a payload goes on the wire as ``ESC ESC_END`` and
every literal ``ESC`` as ``ESC ESC_ESC``. An unescaped ``END`` closes a frame.
"""

END = 0xC0
ESC = 0xDB
ESC_END = 0xDC
ESC_ESC = 0xDD
