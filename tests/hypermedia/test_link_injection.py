"""Tests for link resolution and injection by ResourceStateMachine."""

from dataclasses import dataclass

import pytest
from pydantic import BaseModel

from hyperstate.hypermedia import ResourceStateMachine
from hyperstate.model import CollectionResource, EntityResource, ResourceState, StateKind


class Note:
    """Plain object entity."""

    def __init__(self, note_id: str):
        self.noteId = note_id


@dataclass
class Order:
    id: str
    customer: str


class Customer(BaseModel):
    id: str
    name: str


def by_id(links):
    return sorted(links, key=lambda link: (link.id, link.href))


class TestResolveLink:
    """Tests for single link lookups."""

    def test_get_link_for_custom_link_relation(self, toaster_states):
        """Test that a Link header relation naming a transition gives its link."""
        exists, _ = toaster_states
        machine = ResourceStateMachine(exists)

        link = machine.get_link_from_relation(
            {}, EntityResource(None), '</path>; rel="toaster.cooking>toaster.exists"'
        )

        assert link is not None
        assert link.href == "/baseuri/machines/toaster"
        assert link.id == "toaster.cooking>toaster.exists"

    def test_get_link_for_unknown_relation(self, toaster_states):
        """Test that an unknown relation gives None."""
        exists, _ = toaster_states
        machine = ResourceStateMachine(exists)

        assert machine.get_link_from_relation({}, None, "toaster.exists>toaster.burnt") is None

    def test_get_link_for_method(self, toaster_states):
        """Test lookup of the transition for a method."""
        exists, cooking = toaster_states
        machine = ResourceStateMachine(exists)

        link = machine.get_link_from_method({}, EntityResource(None), cooking, "DELETE")

        assert link is not None
        assert link.href == "/baseuri/machines/toaster"
        assert link.id == "toaster.cooking>toaster.exists"
        assert link.method == "DELETE"

    def test_get_link_for_target_state(self, toaster_states):
        """Test lookup of the transition to a target state."""
        exists, cooking = toaster_states
        machine = ResourceStateMachine(exists)

        link = machine.get_link_to_state({}, None, exists, cooking)

        assert link.href == "/baseuri/machines/toaster/cooking"
        assert link.rel == "cooking"
        assert machine.get_link_to_state({}, None, cooking, cooking) is None

    def test_get_link_for_self_state(self):
        """Test that a transition back to the current state is a self link."""
        collection = ResourceState.collection("machines", "MachineView", "/machines")
        collection.add_transition("POST", collection)
        machine = ResourceStateMachine(collection)

        link = machine.get_link_from_method({}, EntityResource(None), collection, "POST")

        assert link is not None
        assert link.href == "/baseuri/machines"
        assert link.id == "machines.MachineView>machines.MachineView"
        assert link.rel == "self"

    def test_get_link_for_final_pseudo_state(self):
        """Test that no link leads to a pseudo-final state."""
        exists = ResourceState("toaster", "exists", path="/machines/toaster/{id}")
        deleted = ResourceState.pseudo_of(exists, "deleted")
        exists.add_transition("DELETE", deleted)
        machine = ResourceStateMachine(exists)

        assert machine.get_link_from_method({"id": "1"}, EntityResource(None), exists, "DELETE") is None
        assert machine.get_link_to_state({"id": "1"}, None, exists, deleted) is None

    def test_resolve_link_dispatch(self, toaster_states):
        """Test that resolve_link accepts a state, a method or a relation."""
        exists, cooking = toaster_states
        machine = ResourceStateMachine(exists)

        by_state = machine.resolve_link(exists, cooking)
        by_method = machine.resolve_link(cooking, "DELETE")
        by_relation = machine.resolve_link(exists, "toaster.cooking>toaster.exists")

        assert by_state.id == "toaster.exists>toaster.cooking"
        assert by_method.id == "toaster.cooking>toaster.exists"
        assert by_relation.id == "toaster.cooking>toaster.exists"


class TestInjectLinks:
    """Tests for inject_links."""

    def test_get_links_entity_not_found(self):
        """Test that a missing entity gets no links."""
        initial = ResourceState("NOTE", "initial", path="/note/{id}")
        machine = ResourceStateMachine(initial)

        assert machine.inject_links({}, None, initial) == []

    def test_get_links_self(self):
        """Test the self link of a state without transitions."""
        initial = ResourceState("NOTE", "initial", path="/notes/new")
        resource = EntityResource(None)

        links = ResourceStateMachine(initial).inject_links({}, resource, initial)

        assert len(links) == 1
        assert links[0].rel == "self"
        assert links[0].href == "/baseuri/notes/new"
        assert links[0].id == "NOTE.initial>NOTE.initial"
        assert resource.links == links

    def test_self_link_with_unbound_placeholder(self):
        """Test that a self link is emitted even when its path cannot be filled."""
        initial = ResourceState("NOTE", "initial", path="/notes/{id}")

        links = ResourceStateMachine(initial).inject_links({}, EntityResource({"name": "x"}), initial)

        assert [link.id for link in links] == ["NOTE.initial>NOTE.initial"]
        assert links[0].rel == "self"
        assert links[0].href == "/baseuri/notes/{id}"

    def test_self_link_of_unlocated_dynamic_state(self):
        """Test that a dynamic state without a locator links to its parent's path."""
        customer = ResourceState("Customer", "item", path="/customers/{id}")
        located = ResourceState(
            "City",
            "located",
            kind=StateKind.DYNAMIC,
            locator_name="cities",
            locator_args=("{City}",),
            parent=customer,
        )
        customer.add_transition("GET", located)
        machine = ResourceStateMachine(customer)

        links = machine.inject_links({"id": "1"}, EntityResource({"City": "Paris"}), located)

        assert [(link.id, link.href) for link in links] == [
            ("City.located>City.located", "/baseuri/customers/1")
        ]

    @pytest.mark.parametrize(
        "path,expected",
        [
            ("/notes/{id}/reviewers", "/baseuri/notes/123/reviewers"),
            ("/notes/{id}", "/baseuri/notes/123"),
        ],
    )
    def test_get_links_self_path_parameters(self, path, expected):
        """Test that the self link is expanded with the request's path parameters."""
        initial = ResourceState("NOTE", "initial", path=path)

        links = ResourceStateMachine(initial).inject_links({"id": "123"}, EntityResource(None), initial)

        assert [link.href for link in links] == [expected]
        assert links[0].rel == "self"

    def test_get_links_other_resources(self):
        """Test links to other entities' collections plus the service root self link."""
        initial = ResourceState("root", "initial", path="/")
        notes = ResourceState.collection("NOTE", "collection", "/notes")
        persons = ResourceState.collection("PERSON", "collection", "/persons")
        initial.add_transition("GET", notes)
        initial.add_transition("GET", persons)

        links = by_id(ResourceStateMachine(initial).inject_links({}, EntityResource(None), initial))

        assert [(link.rel, link.href, link.id) for link in links] == [
            ("collection", "/baseuri/notes", "root.initial>NOTE.collection"),
            ("collection", "/baseuri/persons", "root.initial>PERSON.collection"),
            ("self", "/baseuri/", "root.initial>root.initial"),
        ]

    def test_self_link_first(self, toaster_states):
        """Test that the self link leads the list."""
        exists, _ = toaster_states

        links = ResourceStateMachine(exists).inject_links({}, EntityResource(None), exists)

        assert [link.rel for link in links] == ["self", "cooking"]

    def test_get_self_loop_not_duplicated(self):
        """Test that an explicit GET to self adds nothing to the implicit self link."""
        root = ResourceState("", "root", path="/root")
        root.add_transition("GET", root)

        links = ResourceStateMachine(root).inject_links({}, EntityResource(None), root)

        assert len(links) == 1
        assert links[0].rel == "self"

    def test_pseudo_target_suppressed(self):
        """Test that transitions to pseudo states produce no links."""
        exists = ResourceState("NOTE", "exists", path="/notes/{id}")
        exists.add_transition("DELETE", ResourceState.pseudo_of(exists, "deleted"))

        links = ResourceStateMachine(exists).inject_links({"id": "1"}, EntityResource(None), exists)

        assert [link.rel for link in links] == ["self"]

    def test_get_links_collection(self):
        """Test collection links and per item links."""
        notes = ResourceState.collection("NOTE", "collection", "/notes")
        item = ResourceState("NOTE", "item", path="/notes/{noteId}")
        notes.add_transition("POST", ResourceState("stack", "new", path="/notes/new", rels=("new",)))
        notes.add_transition_for_each_item("GET", item, {})
        entities = [EntityResource(Note("1")), EntityResource(Note("2")), EntityResource(Note("6"))]
        resource = CollectionResource("notes", entities)

        links = by_id(ResourceStateMachine(notes).inject_links({}, resource, notes))

        assert [(link.method, link.rel, link.href, link.id) for link in links] == [
            ("GET", "self", "/baseuri/notes", "NOTE.collection>NOTE.collection"),
            ("POST", "new", "/baseuri/notes/new", "NOTE.collection>stack.new"),
        ]
        item_links = by_id(link for entity in entities for link in entity.links)
        assert [(link.rel, link.href, link.id) for link in item_links] == [
            ("item", "/baseuri/notes/1", "NOTE.collection>NOTE.item"),
            ("item", "/baseuri/notes/2", "NOTE.collection>NOTE.item"),
            ("item", "/baseuri/notes/6", "NOTE.collection>NOTE.item"),
        ]

    def test_get_links_collection_items(self):
        """Test several per item transitions."""
        notes = ResourceState.collection("NOTE", "collection", "/notes")
        item = ResourceState("NOTE", "item", path="/notes/{noteId}")
        final = ResourceState("NOTE", "final", path="/notes/{noteId}")
        notes.add_transition_for_each_item("GET", item, {})
        notes.add_transition_for_each_item("DELETE", final, {})
        entities = [EntityResource(Note("1")), EntityResource(Note("2")), EntityResource(Note("6"))]

        base_links = ResourceStateMachine(notes).inject_links(
            {}, CollectionResource("notes", entities), notes
        )

        assert len(base_links) == 1
        item_links = by_id(link for entity in entities for link in entity.links)
        assert [(link.rel, link.href, link.method) for link in item_links] == [
            ("final", "/baseuri/notes/1", "DELETE"),
            ("final", "/baseuri/notes/2", "DELETE"),
            ("final", "/baseuri/notes/6", "DELETE"),
            ("item", "/baseuri/notes/1", "GET"),
            ("item", "/baseuri/notes/2", "GET"),
            ("item", "/baseuri/notes/6", "GET"),
        ]

    def test_custom_relation_filters_links(self, toaster_states):
        """Test that a custom relation limits outbound links to the named transitions."""
        exists, _ = toaster_states
        machine = ResourceStateMachine(exists)

        wanted = machine.inject_links(
            {}, EntityResource(None), exists, custom_relation="toaster.exists>toaster.cooking"
        )
        other = machine.inject_links(
            {}, EntityResource(None), exists, custom_relation="toaster.exists>toaster.burnt"
        )

        assert [link.rel for link in wanted] == ["self", "cooking"]
        assert [link.rel for link in other] == ["self"]

    def test_uri_parameters_from_entity(self):
        """Test that URI parameter expressions are filled from entity fields."""
        order = ResourceState("Order", "item", path="/orders/{id}")
        customer = ResourceState("Customer", "item", path="/customers/{id}")
        order.add_transition("GET", customer, {"id": "{customer}"})

        links = ResourceStateMachine(order).inject_links(
            {"id": "7"}, EntityResource(Order("7", "c-42")), order
        )

        assert [link.href for link in links] == ["/baseuri/orders/7", "/baseuri/customers/c-42"]

    def test_extra_uri_parameters_become_query(self):
        """Test that URI parameters that are not path placeholders form the query string."""
        customer = ResourceState("Customer", "item", path="/customers/{id}")
        orders = ResourceState.collection("Order", "collection", "/orders")
        customer.add_transition("GET", orders, {"filter": "customer eq '{id}'"})

        links = ResourceStateMachine(customer).inject_links(
            {"id": "5"}, EntityResource(Customer(id="5", name="Ada")), customer
        )

        assert links[1].href == "/baseuri/orders?filter=customer+eq+%275%27"

    def test_unresolved_placeholder_skips_link(self):
        """Test that a link whose template cannot be filled is skipped."""
        notes = ResourceState.collection("NOTE", "collection", "/notes")
        item = ResourceState("NOTE", "item", path="/notes/{noteId}")
        notes.add_transition("GET", item)

        links = ResourceStateMachine(notes).inject_links({}, EntityResource({}), notes)

        assert [link.rel for link in links] == ["self"]

    def test_lenient_templates_keep_placeholders(self):
        """Test that non strict machines keep unresolved placeholders."""
        notes = ResourceState.collection("NOTE", "collection", "/notes")
        notes.add_transition("GET", ResourceState("NOTE", "item", path="/notes/{noteId}"))

        machine = ResourceStateMachine(notes, strict_templates=False)
        links = machine.inject_links({}, EntityResource({}), notes)

        assert links[1].href == "/baseuri/notes/{noteId}"

    def test_explicit_base_uri(self, toaster_states):
        """Test that an explicit base URI overrides settings."""
        exists, _ = toaster_states

        links = ResourceStateMachine(exists, base_uri="http://api.example.com/").inject_links(
            {}, EntityResource(None), exists
        )

        assert links[0].href == "http://api.example.com/machines/toaster"

    def test_auto_transitions_not_rendered(self):
        """Test that automatic transitions are never links."""
        created = ResourceState("NOTE", "created", path="/notes/{id}/created")
        item = ResourceState("NOTE", "item", path="/notes/{id}")
        created.add_auto_transition(item)

        links = ResourceStateMachine(created).inject_links({"id": "1"}, EntityResource(None), created)

        assert [link.rel for link in links] == ["self"]

    def test_injection_is_idempotent(self, toaster_states):
        """Test that repeated injection gives equal link lists."""
        exists, _ = toaster_states
        machine = ResourceStateMachine(exists)

        first = machine.inject_links({}, EntityResource(None), exists)
        second = machine.inject_links({}, EntityResource(None), exists)

        assert [link.model_dump() for link in first] == [link.model_dump() for link in second]


class TestDynamicTargets:
    """Tests for dynamically located target states."""

    class CityLocator:
        def __init__(self):
            self.calls = []

        def resolve(self, *args):
            self.calls.append(args)
            if args == ("Paris",):
                return ResourceState("City", "paris", path="/cities/paris")
            return None

    def test_dynamic_target_located(self):
        """Test that the locator receives the templated arguments."""
        customer = ResourceState("Customer", "item", path="/customers/{id}")
        city = ResourceState.dynamic("City", "located", "cities", ["{City}"])
        customer.add_transition("GET", city)
        locator = self.CityLocator()
        machine = ResourceStateMachine(customer, locators={"cities": locator})

        links = machine.inject_links({"id": "1"}, EntityResource({"City": "Paris"}), customer)

        assert locator.calls == [("Paris",)]
        assert [link.href for link in links] == ["/baseuri/customers/1", "/baseuri/cities/paris"]
        assert links[1].rel == "paris"

    def test_dynamic_target_not_found(self):
        """Test that no link is produced when the locator finds nothing."""
        customer = ResourceState("Customer", "item", path="/customers/{id}")
        customer.add_transition("GET", ResourceState.dynamic("City", "located", "cities", ["{City}"]))
        machine = ResourceStateMachine(customer, locators={"cities": self.CityLocator()})

        links = machine.inject_links({"id": "1"}, EntityResource({"City": "Oslo"}), customer)

        assert [link.rel for link in links] == ["self"]

    def test_unregistered_locator(self):
        """Test that a missing locator skips the link."""
        customer = ResourceState("Customer", "item", path="/customers/{id}")
        customer.add_transition("GET", ResourceState.dynamic("City", "located", "cities", ["{City}"]))

        links = ResourceStateMachine(customer).inject_links(
            {"id": "1"}, EntityResource({"City": "Paris"}), customer
        )

        assert len(links) == 1
