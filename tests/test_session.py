from formbuilder.model.field import FieldType, FormField
from formbuilder.state.session import FormSession


def test_next_id_skips_ids_already_present():
    session = FormSession()
    session.fields.append(FormField("field_1", FieldType.TEXT, "", 0, 0, 10, 10))

    assert session.next_id() == "field_2"
    assert session.next_id() == "field_3"


def test_snapshot_is_independent(controller):
    field = controller.add_field("dropdown")
    snapshot = controller.session.snapshot()

    controller.move_field(field.id, 300, 400)
    controller.set_options(field.id, ["Changed"])

    assert (snapshot[0].x, snapshot[0].y) == (50.0, 50.0)
    assert snapshot[0].options == ["Option 1", "Option 2", "Option 3"]


def test_lookup_helpers(controller):
    first = controller.add_field("text")
    second = controller.add_field("label")

    assert controller.session.get(second.id) is second
    assert controller.session.index_of(first.id) == 0
    assert controller.session.get("nope") is None
    assert len(controller.session) == 2
