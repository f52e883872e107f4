import threading
from dataclasses import dataclass, field

from buffstream.core.stream.channel import Channel


@dataclass
class ServerState:
    """
    Shared runtime state for a MessageServer.

    This object is mutated by:
    - the connection handlers: add/remove their Channel and thread
    - MessageServer.shutdown(): closes the channels and joins the threads
    """
    connections: set[Channel] = field(default_factory=set)
    """
    Set of open Channels, one per accepted TCP connection.
    """

    threads: set[threading.Thread] = field(default_factory=set)
    """
    Handler threads still running an Application.
    """

    lock: threading.Lock = field(default_factory=threading.Lock)
    """
    Guards both sets; handlers run on their own threads.
    """
