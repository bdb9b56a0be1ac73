from collections import deque

from sqlalchemy import event

from rewear.domain import donation


def receive_load_donation(dn: donation.Donation, _):
    """
    Loaded aggregates skip __init__, so the event queue is set back up here.
    """
    dn.events = deque()


def register_listeners():
    if not event.contains(donation.Donation, "load", receive_load_donation):
        event.listen(donation.Donation, "load", receive_load_donation)
