# minishell

A small interactive command shell. It reads a line, splits it into words and
operators, expands variables, strips quotes and runs the result as a pipeline
of commands.

## Installing

```
pip install .
```

For running the tests:

```
pip install .[test]
pytest
```

## Running

```
minishell
```

When standard input is a terminal, the shell shows a coloured prompt with the
user name and the current directory (the `PWD` variable, with the home
directory shown as `~`), keeps a line history and binds Tab to completion.
Ctrl-C clears the current line; Ctrl-\ and Ctrl-Z are ignored. At end of
input (Ctrl-D) it prints `exit` and exits with the status of the last command.

When input is not a terminal, it reads one command per line without a prompt.
A last line that has no trailing newline is not run.

## What it supports

- Pipelines: `ls -l | grep py | wc -l`
- Redirections: `>` (truncate), `>>` (append), `<` (read from a file) and
  `<<` (heredoc, read up to a line equal to the terminating word; the prompt
  is `heredoc (N) > `)
- Single quotes (taken literally) and double quotes (with `$` expansion)
- Variables: `$NAME`, where a name is a run of letters and digits, and `$?`
  for the exit status of the last command; unset variables expand to nothing
- Built-in commands: `echo` (with `-n`), `cd` (with `~`, `-` and no argument
  for the home directory; it updates `PWD` and `OLDPWD`), `pwd`, `export`
  (lists all variables when given no arguments), `unset`, `env` and `exit`
  (with an optional numeric status)
- Any other command is looked up in `$PATH`, or run directly when its name
  starts with `.` or `/`. A child killed by a signal is reported on standard
  error and gives the status 128 plus the signal number.

Errors are reported in colour on standard error. An unclosed quote is
reported and the line is skipped; an empty pipe, a pipe at the end of the
line or a redirection without a file name is reported with status 2; an
empty command name (`''`) gives status 127; a command not found gives
status 1.

## Using it from Python

```python
from minishell.environment import Environment
from minishell.repl import Shell

shell = Shell(Environment.from_os())
status = shell.run()
```

The pieces can be used on their own:

- `minishell.lexer.split_words` splits a line into words and `Token` values
  and raises `UnclosedQuoteError` for an unclosed quote.
- `minishell.expand.expand_dollars`, `remove_quotes` and `remove_quotes_all`
  substitute variables and strip quotes.
- `minishell.parser.syntax_check` raises `ShellSyntaxError` for a malformed
  line, and `run_line` runs one line through an `Executor`.
- `minishell.executor.build_pipeline` groups words into `Command` objects,
  and `find_executable` looks a name up in a `PATH` string.
- `minishell.builtins.run_builtin` runs a built-in against an `Environment`
  with any text streams; `exit` raises `minishell.errors.ShellExit`.

## What it does not do

- The stages of a pipeline run one after another, not at the same time: each
  stage's output is collected in memory and passed to the next, so a stage
  that never ends blocks the pipeline.
- Built-ins in any but the last stage of a pipeline work on a copy of the
  environment and leave the shell's directory unchanged.
- There are no `&&`, `||`, `;`, subshells, wildcards, backslash escapes,
  background jobs or job control.
- The `minishell` command takes no options and cannot run a script file;
  pipe the script to its standard input instead.