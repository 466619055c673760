import logging
import weakref
from typing import Dict

from sqlalchemy import case, update
from sqlalchemy.exc import SQLAlchemyError

from metacatalog.db.models_db import ObjectIdModel
from metacatalog.models.entities import INVALID_OBJECT_ID

logger = logging.getLogger(__name__)

class RelationalObjectIdGenerator:
    """
    Per-family counters in the ``object_ids`` table.

    Increment and read happen in one ``UPDATE ... RETURNING`` on the
    caller's session, so a committed object always has its counter
    committed with it. A rolled-back transaction also rolls the counter
    back; the highest id handed out on each engine is remembered and the
    counter is moved past it, so an id is never issued twice while the
    engine lives.
    """

    # Engine -> family -> highest id issued.
    _issued: "weakref.WeakKeyDictionary" = weakref.WeakKeyDictionary()

    def __init__(self, sessionManager):
        self.sessionManager = sessionManager

    def _issuedIds(self) -> Dict[str, int]:
        syncEngine = self.sessionManager.engine.sync_engine
        issued = self._issued.get(syncEngine)
        if issued is None:
            issued = self._issued[syncEngine] = {}
        return issued

    async def generate(self, tableName: str) -> int:
        session = self.sessionManager.session
        issued = self._issuedIds()
        floor = issued.get(tableName, 0)
        try:
            result = await session.execute(
                update(ObjectIdModel)
                .where(ObjectIdModel.name == tableName)
                .values(currentId=case(
                    (ObjectIdModel.currentId >= floor, ObjectIdModel.currentId + 1),
                    else_=floor + 1,
                ))
                .returning(ObjectIdModel.currentId)
                .execution_options(synchronize_session=False)
            )
            newId = result.scalar_one_or_none()
            if newId is None:
                newId = floor + 1
                session.add(ObjectIdModel(name=tableName, currentId=newId))
                await session.flush()
        except SQLAlchemyError as e:
            logger.error("Object id generation failed for '%s': %s", tableName, e)
            return INVALID_OBJECT_ID
        issued[tableName] = max(floor, newId)
        return newId
