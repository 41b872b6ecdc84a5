"""Process-wide stop flag shared by the polling loop and the shutdown handler.

The shutdown handler sets this flag, and the polling loop waits on it
between iterations so that it wakes up as soon as a stop is requested.
"""

import threading

# Set once a termination request has been received
STOP_REQUESTED = threading.Event()
