"""
core/services/document_store.py

Persistence capability used by the survey pipeline. Components receive a
``DocumentStore`` explicitly instead of touching the ORM, so the aggregator,
targeting and analytics code only ever see plain camelCase documents.
"""
import logging
from abc import ABC, abstractmethod

from asgiref.sync import sync_to_async
from django.apps import apps
from django.db import DatabaseError, transaction
from django.db.models import F

from core.exceptions import UpstreamError

logger = logging.getLogger('core')


class DocumentStore(ABC):
    """Async document-store interface. Filters use storage field lookups."""

    @abstractmethod
    async def find(self, collection, filters=None, order_by=None, limit=None):
        ...

    @abstractmethod
    async def find_one(self, collection, filters):
        ...

    @abstractmethod
    async def insert(self, collection, document):
        ...

    @abstractmethod
    async def update_one(self, collection, filters, inc=None, set=None):
        ...

    @abstractmethod
    async def delete_many(self, collection, filters):
        ...

    @abstractmethod
    async def insert_related(self, collection, document, link_key, children):
        """Insert a document and its dependents (collection -> document), linked through ``link_key``."""

    @abstractmethod
    async def delete_cascade(self, collection, filters):
        """Delete matching documents with their dependents; returns counts per collection."""


class DjangoDocumentStore(DocumentStore):
    """Backs each collection with a model from the ``surveys`` app."""

    COLLECTIONS = {
        'stores': 'surveys.Store',
        'surveys': 'surveys.Survey',
        'survey_responses': 'surveys.SurveyResponse',
        'survey_analytics': 'surveys.SurveyAnalytics',
    }

    def _model(self, collection):
        try:
            label = self.COLLECTIONS[collection]
        except KeyError:
            raise ValueError(f"Unknown collection '{collection}'")
        return apps.get_model(label)

    def _queryset(self, collection, filters=None, order_by=None):
        qs = self._model(collection).objects.filter(**(filters or {}))
        if order_by:
            qs = qs.order_by(*order_by)
        return qs

    async def find(self, collection, filters=None, order_by=None, limit=None):
        qs = self._queryset(collection, filters, order_by)
        if limit is not None:
            qs = qs[:limit]
        try:
            return [obj.to_document() async for obj in qs]
        except DatabaseError as exc:
            logger.error(f"find on {collection} failed: {exc}")
            raise UpstreamError('Database query failed', detail=str(exc))

    async def find_one(self, collection, filters):
        try:
            obj = await self._queryset(collection, filters).afirst()
        except DatabaseError as exc:
            logger.error(f"find_one on {collection} failed: {exc}")
            raise UpstreamError('Database query failed', detail=str(exc))
        return obj.to_document() if obj is not None else None

    async def insert(self, collection, document):
        obj = self._model(collection).from_document(document)
        try:
            await obj.asave()
        except DatabaseError as exc:
            logger.error(f"insert into {collection} failed: {exc}")
            raise UpstreamError('Database write failed', detail=str(exc))
        return obj.to_document()

    async def update_one(self, collection, filters, inc=None, set=None):
        """
        Applies ``inc`` as ``F()`` increments and ``set`` as plain values on the
        first matching row, then returns the row as re-read from storage.
        """
        model = self._model(collection)
        try:
            pk = await self._queryset(collection, filters).values_list('pk', flat=True).afirst()
            if pk is None:
                return None
            changes = dict(set or {})
            for field, amount in (inc or {}).items():
                changes[field] = F(field) + amount
            if changes:
                await model.objects.filter(pk=pk).aupdate(**changes)
            obj = await model.objects.aget(pk=pk)
        except DatabaseError as exc:
            logger.error(f"update on {collection} failed: {exc}")
            raise UpstreamError('Database write failed', detail=str(exc))
        return obj.to_document()

    async def delete_many(self, collection, filters):
        try:
            _, per_model = await self._queryset(collection, filters).adelete()
        except DatabaseError as exc:
            logger.error(f"delete on {collection} failed: {exc}")
            raise UpstreamError('Database delete failed', detail=str(exc))
        # cascaded rows are reported per model; count this collection only
        return per_model.get(self._model(collection)._meta.label, 0)

    async def insert_related(self, collection, document, link_key, children):
        def write():
            with transaction.atomic():
                parent = self._model(collection).from_document(document)
                parent.save()
                for child_collection, child in children.items():
                    self._model(child_collection).from_document({**child, link_key: parent.pk}).save()
            return parent.to_document()

        try:
            return await sync_to_async(write)()
        except DatabaseError as exc:
            logger.error(f"insert into {collection} failed: {exc}")
            raise UpstreamError('Database write failed', detail=str(exc))

    async def delete_cascade(self, collection, filters):
        # a single delete lets the ORM collect dependents inside one transaction
        try:
            _, per_model = await self._queryset(collection, filters).adelete()
        except DatabaseError as exc:
            logger.error(f"delete on {collection} failed: {exc}")
            raise UpstreamError('Database delete failed', detail=str(exc))
        return {
            name: per_model.get(label, 0)
            for name, label in self.COLLECTIONS.items()
        }
