from __future__ import annotations

import operator
from abc import ABC, abstractmethod
from collections import OrderedDict
from functools import wraps
from typing import Generic, Literal, Type, TypeVar

from sqlalchemy import and_, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.sql.elements import BinaryExpression
from sqlalchemy.sql.selectable import Select

ModelType = TypeVar("ModelType", bound=object)
LOGICAL_OPERATOR = Literal["and", "or"]

COMPARATORS = {
    "eq": operator.eq,
    "not_eq": operator.ne,
    "gt": operator.gt,
    "gte": operator.ge,
    "lt": operator.lt,
    "lte": operator.le,
    "in": lambda col, val: col.in_(val),
    "not_in": lambda col, val: col.not_in(val),
}


class Exceptions:
    class InvalidConditionGiven(Exception):
        ...

    class InvalidOperation(Exception):
        ...


class RepositoryDecorators:
    @staticmethod
    def query_resetter(func):
        @wraps(func)
        async def wrapper(self: SqlAlchemyRepository, *args, **kwargs):
            try:
                return await func(self, *args, **kwargs)
            finally:
                self._query_reset()

        return wrapper


class AbstractRepository(ABC):
    def add(self, model):
        self._add(model)

    @RepositoryDecorators.query_resetter
    async def get(self, is_update=False):
        return await self._get(is_update=is_update)

    @RepositoryDecorators.query_resetter
    async def list(self, is_update=False):
        return await self._list(is_update=is_update)

    def filter(self, *args, logical_operator: LOGICAL_OPERATOR = "and", **kwargs):
        self._filter(*args, logical_operator=logical_operator, **kwargs)
        return self

    @abstractmethod
    def _add(self, model):
        raise NotImplementedError

    @abstractmethod
    async def _get(self, *, is_update):
        raise NotImplementedError

    @abstractmethod
    async def _list(self, *, is_update):
        raise NotImplementedError

    @abstractmethod
    def _filter(self, *args, logical_operator: LOGICAL_OPERATOR, **kwargs):
        raise NotImplementedError

    @abstractmethod
    def _query_reset(self):
        raise NotImplementedError


class SqlAlchemyRepository(AbstractRepository):
    """
    Query builder over one mapped model.

        repository.filter(status__eq="pending").order_by(...).list()
        repository.filter(donation__has_donor_id__eq=donor_id).list()
    """

    def __init__(self, *, model: Type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session
        self._base_query: Select = select(self.model)

    def _query_reset(self):
        self._base_query = select(self.model)

    def _filter(self, *args, logical_operator: LOGICAL_OPERATOR, **kwargs):
        for arg in args:
            if not isinstance(arg, BinaryExpression):
                raise Exceptions.InvalidConditionGiven(f"Non-keywords argument must be BinaryExpression : {str(arg)}")
            self._base_query = self._base_query.filter(arg)

        cond = [self._condition(self.model, key, val) for key, val in kwargs.items()]
        if logical_operator == "and":
            self._base_query = self._base_query.where(and_(True, *cond))
        else:
            self._base_query = self._base_query.where(or_(*cond))

    @classmethod
    def _condition(cls, model, key: str, val):
        """
        colname__op = value
        relationship__has_colname__op = value
        """
        match key.split("__", 1):
            case [col_name, op]:
                pass
            case _:
                raise Exceptions.InvalidConditionGiven(
                    "Filter Option Not Correctly Given. (Hint) Use The Following Format - colname__eq = value"
                )
        try:
            col = getattr(model, col_name)
        except AttributeError:
            raise Exceptions.InvalidConditionGiven(f"No Such Column({col_name}) Exist For This Model: {str(model)}")

        if op.startswith("has_"):
            related = col.property.mapper.class_
            return col.has(cls._condition(related, op[4:], val))
        if op not in COMPARATORS:
            raise Exceptions.InvalidConditionGiven(f"No Such Operation Exist: {op}")
        return COMPARATORS[op](col, val)

    def order_by(self, *criteria):
        self._base_query = self._base_query.order_by(*criteria)
        return self

    def _locked(self, query: Select) -> Select:
        # lock only the aggregate root row, eager joins stay unlocked
        return query.with_for_update(of=self.model)

    async def _get(self, *, is_update):
        query = self._base_query.limit(1)
        if is_update:
            query = self._locked(query)
        q = await self.session.execute(query)
        return q.unique().scalars().first()

    async def _list(self, *, is_update):
        query = self._locked(self._base_query) if is_update else self._base_query
        q = await self.session.execute(query)
        return q.unique().scalars().all()


class AsyncSqlAlchemyRepository(Generic[ModelType], SqlAlchemyRepository):
    """
    Write side repository. Every aggregate it hands out or receives is
    remembered so the unit of work can drain their events after commit.
    """

    def __init__(self, *, model: Type[ModelType], session: AsyncSession):
        super().__init__(model=model, session=session)
        self.seen: OrderedDict = OrderedDict()

    def _add(self, model):
        self.session.add(model)
        self._track(model)

    async def _get(self, *, is_update):
        res = await super()._get(is_update=is_update)
        if res is not None:
            self._track(res)
        return res

    async def _list(self, *, is_update):
        res = await super()._list(is_update=is_update)
        for model in res:
            self._track(model)
        return res

    def _track(self, model):
        self.seen[model] = None

    def collect_events(self):
        for model in self.seen:
            events = getattr(model, "events", None)
            while events:
                yield events.popleft()


class AsyncSqlAlchemyViewRepository(Generic[ModelType], SqlAlchemyRepository):
    def _add(self, model):
        raise Exceptions.InvalidOperation
