""" Idempotent create-or-update of owned objects.
"""

import copy
import logging

from sqlite_operator.resources.common import build_owner_reference

logger = logging.getLogger(__name__)

CREATED = "created"
UPDATED = "updated"
UNCHANGED = "unchanged"


def set_owner_reference(obj, owner):
    """ Make ``owner`` the controller of ``obj``, in place.

    An existing reference with the same uid is replaced, so repeated calls
    leave the object unchanged.
    """
    owner_ref = build_owner_reference(owner)
    owner_refs = obj.setdefault("metadata", {}).setdefault("ownerReferences", [])

    for index, existing in enumerate(owner_refs):
        if existing.get("uid") == owner_ref["uid"]:
            owner_refs[index] = owner_ref
            return obj

    owner_refs.append(owner_ref)
    return obj


def merge_owner_reference(live, desired, owner):
    """ Default merge: only ownership is reconciled on existing objects.
    """
    set_owner_reference(live, owner)


def ensure(cluster, desired, owner, merge=merge_owner_reference):
    """ Make sure ``desired`` exists in the cluster and is owned by ``owner``.

    Args:
        cluster: ClusterClient (or anything with get/create/replace)
        desired: Manifest dict produced by a builder
        owner: Body of the owning SqliteDatabase
        merge: Callable(live, desired, owner) mutating ``live`` in place

    Returns:
        "created", "updated" or "unchanged"
    """
    kind = desired["kind"]
    name = desired["metadata"]["name"]
    namespace = desired["metadata"]["namespace"]

    live = cluster.get(kind, name, namespace)
    if live is None:
        body = set_owner_reference(copy.deepcopy(desired), owner)
        cluster.create(kind, namespace, body)
        logger.info(f"Created {kind} {name} in {namespace}")
        return CREATED

    merged = copy.deepcopy(live)
    merge(merged, desired, owner)
    if merged == live:
        logger.debug(f"{kind} {name} in {namespace} is up to date")
        return UNCHANGED

    cluster.replace(kind, name, namespace, merged)
    logger.info(f"Updated {kind} {name} in {namespace}")
    return UPDATED
