import pytest

from ckman.xmlfile import XMLAttr, XMLFile, convert_mapping


def test_xml_write(tmp_path):
    target = tmp_path / "macros.xml"
    macros = XMLFile(str(target))
    macros.begin("yandex")
    macros.comment("macros configuration, you can select from system.macros")
    macros.begin("macros")
    macros.write("replica", "/clickhouse/tables/1/default/t123/replica")
    macros.write("shard", 3)
    macros.end("macros")
    macros.end("yandex")
    macros.dump()
    assert target.read_text() == (
        "<yandex>\n"
        "    <!-- macros configuration, you can select from system.macros -->\n"
        "    <macros>\n"
        "        <replica>/clickhouse/tables/1/default/t123/replica</replica>\n"
        "        <shard>3</shard>\n"
        "    </macros>\n"
        "</yandex>\n"
    )
    assert macros.indent == 0


def test_merge(tmp_path):
    mapping = {
        "a/b/c": "bar",
        "a/b/d": "foo",
        "a/e": "baz",
        "a/g/k[@id=13]": "hello",
        "d": True,
        "title[@lang='en', @size=4]/header": "header123",
        "volumes/disk": ["hdfs1", "hdfs2", "local"],
        "m/n": "[1,2,3,4]",
    }
    target = tmp_path / "merge_test.xml"
    xml = XMLFile(str(target))
    xml.begin("yandex")
    xml.merge(mapping)
    xml.end("yandex")
    xml.dump()
    assert target.read_text() == (
        "<yandex>\n"
        "    <a>\n"
        "        <b>\n"
        "            <c>bar</c>\n"
        "            <d>foo</d>\n"
        "        </b>\n"
        "        <e>baz</e>\n"
        "        <g>\n"
        '            <k id="13">hello</k>\n'
        "        </g>\n"
        "    </a>\n"
        "    <d>true</d>\n"
        "    <m>\n"
        "        <n>1</n>\n"
        "        <n>2</n>\n"
        "        <n>3</n>\n"
        "        <n>4</n>\n"
        "    </m>\n"
        '    <title lang="en" size="4">\n'
        "        <header>header123</header>\n"
        "    </title>\n"
        "    <volumes>\n"
        "        <disk>hdfs1</disk>\n"
        "        <disk>hdfs2</disk>\n"
        "        <disk>local</disk>\n"
        "    </volumes>\n"
        "</yandex>\n"
    )


def test_convert_mapping_nests_keys():
    assert convert_mapping({"a/b": "x", "a/c": "[1,2]", "d": "y"}) == {
        "a": {"b": "x", "c": ["1", "2"]},
        "d": "y",
    }


def test_convert_mapping_conflict_raises():
    with pytest.raises(TypeError):
        convert_mapping({"a": "x", "a/b": "y"})


def test_write_escapes_text():
    xml = XMLFile("x.xml")
    xml.write("a", "<x & 'y'>")
    assert xml.context == "<a>&lt;x &amp; &apos;y&apos;&gt;</a>\n"


def test_write_none_is_skipped():
    xml = XMLFile("x.xml")
    xml.write("a", None)
    xml.write_with_attr("b", None, [XMLAttr("k", "v")])
    assert xml.context == ""


def test_write_with_attr_and_float():
    xml = XMLFile("x.xml")
    xml.write_with_attr("disk", 1.5, [XMLAttr("type", "local"), XMLAttr("ratio", 2.0)])
    assert xml.context == '<disk type="local" ratio="2">1.5</disk>\n'


def test_begin_with_attr_indents():
    xml = XMLFile("x.xml")
    xml.begin_with_attr("shard", [XMLAttr("id", 1)])
    xml.write("weight", False)
    xml.end("shard")
    xml.append("<!-- tail -->\n")
    assert xml.context == '<shard id="1">\n    <weight>false</weight>\n</shard>\n<!-- tail -->\n'


def test_dump_requires_name():
    xml = XMLFile("")
    xml.write("a", 1)
    with pytest.raises(ValueError, match="name"):
        xml.dump()


def test_dump_requires_context(tmp_path):
    with pytest.raises(ValueError, match="context is empty"):
        XMLFile(str(tmp_path / "empty.xml")).dump()