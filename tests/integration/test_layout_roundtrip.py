"""End-to-end edits of a real file: parse, change, save and parse again."""
from propfile.properties import Properties

WINDOWS_FILE = (
    b"# Application messages\r\n"
    b"\r\n"
    b"greeting=Hello\r\n"
    b"farewell =  Goodbye  \r\n"
    b"! section two\r\n"
    b"long.text = first part \\\r\n"
    b"    second part\r\n"
    b"obsolete = remove me\r\n"
)


def test_edit_windows_file(tmp_path):
    path = tmp_path / "messages.properties"
    path.write_bytes(WINDOWS_FILE)

    props = Properties.from_file(str(path))
    assert props.get("long.text") == "first part      second part"

    props.add("greeting", "Hi")
    props.add("added", "new")
    props.delete("obsolete")
    props.save()

    assert path.read_bytes() == (
        b"# Application messages\n"
        b"greeting = Hi\n"
        b"farewell = Goodbye\n"
        b"! section two\n"
        b"long.text = first part  \n"
        b"    second part\n"
        b"added = new\n"
        b"\n"
    )

    reloaded = Properties.from_file(str(path))
    assert reloaded.get("greeting") == "Hi"
    assert reloaded.get("farewell") == "Goodbye"
    assert reloaded.get("added") == "new"
    assert "obsolete" not in reloaded


def test_saving_twice_gives_the_same_bytes(tmp_path):
    path = tmp_path / "stable.properties"
    path.write_bytes(b"a=1\n#c\nb = 2\n")

    Properties.from_file(str(path)).save()
    first = path.read_bytes()
    Properties.from_file(str(path)).save()

    assert path.read_bytes() == first == b"a = 1\n#c\nb = 2\n\n"
