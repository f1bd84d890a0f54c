__all__ = ['Event']


class Event:
    """
    Minimal signal used by the data classes to notify listeners of changes.

    Parameters
    ----------
    objectType:
        Type of the argument passed to the slots on emit (informative only).
    """
    def __init__(self, objectType=None):
        self._objectType = objectType
        self._slots = []

    def connect(self, slot):
        if slot not in self._slots:
            self._slots.append(slot)

    def disconnect(self, slot):
        if slot in self._slots:
            self._slots.remove(slot)

    def emit(self, *args):
        for slot in list(self._slots):
            slot(*args)
