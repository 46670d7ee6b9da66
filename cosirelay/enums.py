from enum import Enum

class Parity(str, Enum):
    NONE = "none"
    EVEN = "even"
    ODD  = "odd"

class FlowControl(str, Enum):
    NONE     = "none"
    RTS_CTS  = "rts_cts"       # аппаратный RTS/CTS
    XON_XOFF = "xon_xoff"      # программный XON/XOFF
