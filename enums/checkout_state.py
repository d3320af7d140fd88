from enum import Enum


class CheckoutState(Enum):
    IDLE = "IDLE"               # No valid checkout data yet
    PENDING = "PENDING"         # Valid data, waiting for the quiet period
    STARTED = "STARTED"         # "checkout started" emitted for the session id
    COMPLETED = "COMPLETED"     # Purchase completed, session id cleared
    ABANDONED = "ABANDONED"     # Terminal, decided by the webhook relay's own timeout (never set locally)
