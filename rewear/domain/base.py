from __future__ import annotations

import secrets
import string
from abc import ABC
from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum


def sn_alphanum(length: int = 10) -> str:
    """
    generate sn with combination of
    Uppercase Alphabet and numbers 1 - 9
    """
    return "".join(secrets.choice(string.ascii_uppercase + string.digits[1:]) for _ in range(length))


@dataclass(repr=True, eq=False)
class Base(ABC):
    """
    Base Class For Domain Models
    """

    id: str = field(init=False)
    create_dt: datetime = field(init=False)
    update_dt: datetime = field(init=False)

    @classmethod
    def from_kwargs(cls, **kwargs):
        """
        Build a model from keyword arguments, including init=False fields such as `id`.
        Keys that are not model fields are ignored.
        """
        field_names = {f.name for f in fields(cls)}
        init_names = {f.name for f in fields(cls) if f.init}
        obj = cls(**{k: v for k, v in kwargs.items() if k in init_names})
        for k, v in kwargs.items():
            if k in field_names and k not in init_names:
                setattr(obj, k, v)
        return obj

    def __eq__(self, other):
        if not isinstance(other, Base):
            return False
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)


class BaseEnums:
    class NotificationType(str, Enum):
        DONATION_MATCHED = "DONATION_MATCHED"  # 기관 매칭
        DONATION_APPROVED = "DONATION_APPROVED"  # 승인
        DONATION_REJECTED = "DONATION_REJECTED"  # 반려 및 취소


@dataclass
class Message:
    signature: str = field(init=False)

    def __post_init__(self):
        self.signature = self.__class__.__name__

    def __hash__(self):
        return hash((self.signature, id(self)))

    def __eq__(self, others):
        return self is others


event_registry: dict[str, type] = {}
command_registry: dict[str, type] = {}


def register_event(class_):
    event_registry[class_.__name__] = class_
    return class_


def register_command(class_):
    command_registry[class_.__name__] = class_
    return class_

