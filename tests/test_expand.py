import pytest

from minishell.environment import Environment
from minishell.expand import expand_dollars, remove_quotes, remove_quotes_all
from minishell.lexer import Token, UnclosedQuoteError


@pytest.fixture
def env():
    return Environment({"USER": "alice", "HOME": "/home/alice", "MY": "x"})


def test_expand_variable(env):
    assert expand_dollars("hello $USER!", env) == f"hello {env.get('USER')}!"


def test_unknown_variable_is_empty(env):
    assert expand_dollars("a$NOPE", env) == "a"


def test_exit_status(env):
    assert expand_dollars("$?", env, 42) == "42"


def test_lone_dollar_kept(env):
    assert expand_dollars("$", env) == "$"
    assert expand_dollars("$ x", env) == "$ x"


def test_underscore_ends_name(env):
    assert expand_dollars("$MY_VAR", env) == "x_VAR"


def test_values_are_not_rescanned():
    env = Environment({"A": "$B", "B": "zz"})
    assert expand_dollars("$A", env) == "$B"


def test_text_without_dollar_unchanged(env):
    assert expand_dollars("plain text", env) == "plain text"


def test_single_quotes_are_literal(env):
    assert remove_quotes("'$USER'", env) == "$USER"


def test_double_quotes_expand(env):
    assert remove_quotes('"$USER"', env) == env.get("USER")


def test_quotes_inside_word(env):
    assert remove_quotes('a"b c"d', env) == "ab cd"


def test_dollar_before_quote_is_dropped(env):
    assert remove_quotes('$"USER"', env) == "USER"


def test_lone_dollar_in_word_kept(env):
    assert remove_quotes("$", env) == "$"


def test_status_in_word(env):
    assert remove_quotes("$?", env, 3) == "3"


def test_unquoted_variable(env):
    assert remove_quotes("$HOME", env) == env.get("HOME")


def test_quotes_in_value_are_kept():
    env = Environment({"Q": "'a'"})
    assert remove_quotes("$Q", env) == "'a'"


def test_unclosed_quote_raises(env):
    with pytest.raises(UnclosedQuoteError):
        remove_quotes('"unclosed', env)


def test_word_without_specials_unchanged(env):
    assert remove_quotes("simple-word", env) == "simple-word"


def test_remove_quotes_all_keeps_tokens(env):
    items = ["echo", Token.PIPE, "'a'", Token.OUT_WRITE, '"$USER"']
    assert remove_quotes_all(items, env) == [
        "echo",
        Token.PIPE,
        "a",
        Token.OUT_WRITE,
        env.get("USER"),
    ]


def test_remove_quotes_all_preserves_length(env):
    items = ["a", Token.INPUT, "b", "'c d'"]
    assert len(remove_quotes_all(items, env)) == len(items)