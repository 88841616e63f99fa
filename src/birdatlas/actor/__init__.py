"""Remote service client (actor) and payload coercion."""

from birdatlas.actor.client import HttpActor
from birdatlas.actor.interface import Actor

__all__ = ["Actor", "HttpActor"]
