import copy

from bru2zod.generator.restructure import (
    build_ref_map,
    mark_references,
    ref_target,
    restructure,
    unwrap_root_ref,
)


def _ref(name):
    return {"$ref": f"#/definitions/{name}"}


def _obj(**properties):
    return {"type": "object", "properties": properties, "required": list(properties)}


INT = {"type": "integer"}
STR = {"type": "string"}


def _assert_no_dangling(schema):
    definitions = schema["definitions"]

    def walk(node):
        if isinstance(node, dict):
            target = ref_target(node)
            if target is not None:
                assert target in definitions, target
            for value in node.values():
                walk(value)
        elif isinstance(node, list):
            for value in node:
                walk(value)

    walk(schema)


class TestUnwrapRootRef:
    def test_inlines_root_definition(self):
        draft = {
            "$schema": "x",
            "$ref": "#/definitions/Body",
            "definitions": {"Body": _obj(id=INT), "Other": _obj(a=STR)},
        }
        result = unwrap_root_ref(draft)
        assert result["type"] == "object"
        assert "$ref" not in result
        assert list(result["definitions"]) == ["Other"]
        assert "Body" in draft["definitions"]

    def test_leaves_plain_root_alone(self):
        draft = {"type": "string"}
        assert unwrap_root_ref(draft) is draft


class TestRestructureArrays:
    def test_array_of_inline_objects(self):
        schema = _obj(posts={"type": "array", "items": _obj(id=INT, title=STR)})
        result = restructure(schema, "GetPostsBody")
        definitions = result["definitions"]

        assert list(definitions) == ["GetPostsBodyPostsItem", "GetPostsBodyPosts"]
        assert definitions["GetPostsBodyPostsItem"]["properties"] == {"id": INT, "title": STR}
        assert definitions["GetPostsBodyPosts"] == {"type": "array", "items": _ref("GetPostsBodyPostsItem")}
        assert result["properties"]["posts"] == _ref("GetPostsBodyPosts")

    def test_array_of_referenced_objects_is_cloned(self):
        schema = {
            **_obj(posts={"type": "array", "items": _ref("Post")}),
            "definitions": {"Post": _obj(id=INT)},
        }
        before = copy.deepcopy(schema)
        result = restructure(schema, "Body")

        assert "Post" not in result["definitions"]
        assert result["definitions"]["BodyPostsItem"]["properties"] == {"id": INT}
        assert schema == before

    def test_array_of_scalars(self):
        result = restructure(_obj(tags={"type": "array", "items": STR}), "Body")
        assert result["definitions"]["BodyTagsItem"] == STR
        assert result["definitions"]["BodyTags"]["items"] == _ref("BodyTagsItem")

    def test_nested_arrays(self):
        schema = _obj(grid={"type": "array", "items": {"type": "array", "items": _obj(v=INT)}})
        result = restructure(schema, "Body")
        definitions = result["definitions"]

        assert definitions["BodyGrid"]["items"] == _ref("BodyGridItem")
        assert definitions["BodyGridItem"] == {"type": "array", "items": _ref("BodyGridItemItem")}
        assert definitions["BodyGridItemItem"]["properties"] == {"v": INT}

    def test_array_without_items(self):
        result = restructure(_obj(things={"type": "array"}), "Body")
        assert result["definitions"]["BodyThingsItem"] == {}

    def test_root_array(self):
        schema = {"type": "array", "items": _ref("Row"), "definitions": {"Row": _obj(id=INT)}}
        result = restructure(schema, "List")
        assert result["items"] == _ref("ListItem")
        assert list(result["definitions"]) == ["ListItem"]


class TestRestructureObjects:
    def test_inline_object_is_lifted_by_path(self):
        schema = _obj(data=_obj(user=_obj(id=INT)))
        result = restructure(schema, "Get200")
        definitions = result["definitions"]

        assert result["properties"]["data"] == _ref("Get200Data")
        assert definitions["Get200Data"]["properties"]["user"] == _ref("Get200DataUser")
        assert definitions["Get200DataUser"]["properties"] == {"id": INT}

    def test_shared_reference_gets_one_definition_per_path(self):
        schema = {
            **_obj(author=_ref("Author"), editor=_ref("Author")),
            "definitions": {"Author": _obj(id=INT)},
        }
        result = restructure(schema, "Body")
        definitions = result["definitions"]

        assert result["properties"]["author"] == _ref("BodyAuthor")
        assert result["properties"]["editor"] == _ref("BodyEditor")
        assert definitions["BodyAuthor"] == definitions["BodyEditor"]
        assert definitions["BodyAuthor"] is not definitions["BodyEditor"]
        assert "Author" not in definitions

    def test_correctly_named_reference_is_untouched(self):
        schema = {**_obj(x=_ref("BodyX")), "definitions": {"BodyX": _obj(id=INT)}}
        result = restructure(schema, "Body")
        assert result["properties"]["x"] == _ref("BodyX")
        assert list(result["definitions"]) == ["BodyX"]

    def test_complex_naming(self):
        schema = {
            **_obj(data=_ref("Data")),
            "definitions": {
                "Data": _obj(posts={"type": "array", "items": _ref("Post")}),
                "Post": _obj(id=INT, title=STR),
            },
        }
        result = restructure(schema, "GetGetPosts200")
        assert set(result["definitions"]) == {
            "GetGetPosts200Data",
            "GetGetPosts200DataPosts",
            "GetGetPosts200DataPostsItem",
        }
        _assert_no_dangling(result)

    def test_scalars_are_untouched(self):
        schema = _obj(id=INT, name={"type": ["string", "null"]})
        result = restructure(schema, "Body")
        assert result["properties"] == {"id": INT, "name": {"type": ["string", "null"]}}
        assert result["definitions"] == {}

    def test_colliding_names_get_a_suffix(self):
        schema = _obj(**{"user-id": _obj(a=INT), "userId": _obj(b=INT)})
        result = restructure(schema, "Body")
        assert result["properties"]["user-id"] == _ref("BodyUserId")
        assert result["properties"]["userId"] == _ref("BodyUserId2")


class TestRestructureReferences:
    def test_recursive_shape_points_back_at_ancestor(self):
        schema = {
            **_obj(tree=_ref("Node")),
            "definitions": {"Node": _obj(children={"type": "array", "items": _ref("Node")})},
        }
        result = restructure(schema, "Body")
        definitions = result["definitions"]

        assert result["properties"]["tree"] == _ref("BodyTree")
        assert definitions["BodyTreeChildren"]["items"] == _ref("BodyTree")
        _assert_no_dangling(result)

    def test_refs_inside_any_of_are_adopted(self):
        schema = {
            **_obj(owner={"anyOf": [_ref("Owner"), {"type": "null"}]}),
            "definitions": {"Owner": _obj(pet=_obj(name=STR))},
        }
        result = restructure(schema, "Body")
        definitions = result["definitions"]

        assert "Owner" in definitions
        assert definitions["Owner"]["properties"]["pet"] == _ref("OwnerPet")
        _assert_no_dangling(result)

    def test_unreachable_definitions_are_dropped(self):
        schema = {**_obj(id=INT), "definitions": {"Orphan": _obj(a=INT)}}
        assert restructure(schema, "Body")["definitions"] == {}


class TestRefMapAndMarkers:
    def test_build_ref_map(self):
        assert build_ref_map({"GetPostsBodyPosts": {}, "GetPostsBodyPostsItem": {}}) == {
            "GetPostsBodyPosts": "getPostsBodyPostsSchema",
            "GetPostsBodyPostsItem": "getPostsBodyPostsItemSchema",
        }

    def test_mark_references(self):
        node = {"type": "array", "items": _ref("Item")}
        marked = mark_references(node, {"Item": "itemSchema"})
        assert marked == {"type": "array", "items": {"const": "__REF__itemSchema"}}
        assert node["items"] == _ref("Item")

    def test_unknown_refs_are_kept(self):
        node = {"anyOf": [_ref("Elsewhere")]}
        assert mark_references(node, {}) == node


class TestReservedNames:
    def test_root_name_is_never_reused(self):
        result = restructure(_obj(**{"$": _obj(a=INT)}), "GetXBody")
        assert result["properties"]["$"] == _ref("GetXBody2")
        assert list(result["definitions"]) == ["GetXBody2"]

    def test_reserved_names_are_skipped(self):
        result = restructure(_obj(header=_obj(a=INT)), "GetX200", reserved={"GetX200Header"})
        assert result["properties"]["header"] == _ref("GetX200Header2")
        assert "GetX200Header" not in result["definitions"]

    def test_reference_to_taken_name_is_cloned(self):
        schema = {
            **_obj(**{"x-": _obj(b=STR), "x": _ref("BodyX")}),
            "definitions": {"BodyX": _obj(a=INT)},
        }
        result = restructure(schema, "Body")
        definitions = result["definitions"]

        assert result["properties"]["x-"] == _ref("BodyX")
        assert definitions["BodyX"]["properties"] == {"b": STR}
        assert result["properties"]["x"] == _ref("BodyX2")
        assert definitions["BodyX2"]["properties"] == {"a": INT}

    def test_adopted_definition_named_like_root_is_renamed(self):
        schema = {
            **_obj(owner={"anyOf": [_ref("Body"), {"type": "null"}]}),
            "definitions": {"Body": _obj(a=INT)},
        }
        result = restructure(schema, "Body")

        assert result["properties"]["owner"]["anyOf"][0] == _ref("Body2")
        assert list(result["definitions"]) == ["Body2"]
        _assert_no_dangling(result)
