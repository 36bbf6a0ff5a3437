import pytest

from qpdlkit.cmdline import ArgError, CommandLine

SPECS = ["~help,h", "~version,v", "output=1,o"]


def make():
    return CommandLine(SPECS)


def test_short_option_with_value_and_parameter():
    cl = make()
    assert cl.parse(["prog", "-o", "out.pbm", "in.jbg"], 1)
    assert cl.application_name == "prog"
    assert cl.option_arg("output", 0) == "out.pbm"
    assert cl.parameter(0) == "in.jbg"
    assert cl.error_messages() == []


def test_long_option_with_value():
    cl = make()
    assert cl.parse(["prog", "--output", "x", "file"], 1)
    assert cl.option_arg("output", 0) == "x"
    assert cl.is_option_set("output")
    assert not cl.is_option_set("help")


def test_help_can_replace_parameters():
    cl = make()
    assert cl.parse(["prog", "--help"], 1)
    assert cl.is_option_set("help")
    cl2 = make()
    assert cl2.parse(["prog", "-h"], 1)
    assert cl2.is_option_set("help")


def test_missing_parameter():
    cl = make()
    assert not cl.parse(["prog"], 1)
    assert cl.error_messages() == ["Not enough parameter(s)"]


def test_unknown_long_and_short_options():
    cl = make()
    assert not cl.parse(["prog", "--bogus", "-z"], 0)
    assert cl.error_messages() == ["Unknown option --bogus", "Unknown option -z"]


def test_option_value_missing():
    cl = make()
    assert not cl.parse(["prog", "--output"], 0)
    assert cl.error_messages() == ["Not enough parameter(s) for option --output"]
    assert not cl.is_option_set("output")


def test_option_value_cannot_be_an_option():
    cl = make()
    assert not cl.parse(["prog", "-o", "-h"], 0)
    assert cl.error_messages() == ["Not enough parameter(s) for option -o"]
    assert cl.is_option_set("help")


def test_too_many_parameters_reported_once():
    cl = make()
    assert not cl.parse(["prog", "a", "b", "c"], 1)
    assert cl.error_messages() == ["Too much parameter(s)"]
    assert cl.parameter(0) == "a"


def test_combined_short_options_share_values():
    cl = make()
    assert cl.parse(["prog", "-ho", "dest", "src"], 1)
    assert cl.is_option_set("help")
    assert cl.option_arg("output", 0) == "dest"
    assert cl.parameter(0) == "src"


def test_empty_argv():
    cl = make()
    assert not cl.parse([], 0)
    assert cl.error_messages() == ["Invalid argument number"]


def test_parse_resets_state():
    cl = make()
    cl.parse(["prog", "-o", "x", "a"], 1)
    assert cl.parse(["other", "b"], 1)
    assert not cl.is_option_set("output")
    assert cl.parameter(0) == "b"
    assert cl.application_name == "other"


def test_add_supported_directly():
    cl = CommandLine()
    cl.add_supported("pair", "p", 2)
    assert cl.parse(["prog", "-p", "one", "two"], 0)
    assert cl.option_arg("pair", 1) == "two"


def test_spec_with_invalid_count_takes_no_value():
    cl = CommandLine(["flag=x,f"])
    assert cl.parse(["prog", "-f", "param"], 1)
    assert cl.is_option_set("flag")
    assert cl.parameter(0) == "param"


def test_missing_values_raise():
    cl = make()
    cl.parse(["prog", "in"], 1)
    with pytest.raises(ArgError):
        cl.option_arg("output", 0)
    with pytest.raises(ArgError):
        cl.parameter(1)