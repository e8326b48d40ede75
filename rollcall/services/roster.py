"""Roster directory lookups used by check-in."""

from rollcall.models import Person


def list_members(organization_id: int, group_ids=None) -> list:
    """
    Active roster members of an organization.

    Args:
        organization_id: Organization to list
        group_ids: Optional iterable of group ids to restrict to. An empty
                   collection means "no groups" and returns nothing.

    Returns:
        list of Person ordered by name
    """
    query = Person.query.filter_by(organization_id=organization_id, active=True)
    if group_ids is not None:
        group_ids = list(group_ids)
        if not group_ids:
            return []
        query = query.filter(Person.group_id.in_(group_ids))
    return query.order_by(Person.name, Person.id).all()


def member_ids_in_groups(organization_id: int, group_ids=None) -> set:
    """Ids of active members, optionally restricted to the given groups."""
    return {person.id for person in list_members(organization_id, group_ids)}
