"""Bash grammar (also registered as ``shell``).

Command substitution re-enters most of the bash grammar. Those rules live in
a helper grammar registered as ``bash-substitution`` and are referenced
lazily, which lets the bash rules and the helper refer to each other.
"""

from .base import Grammar, GrammarRef, Rule, keyword_pattern

SUBSTITUTION = "bash-substitution"

ENV_VARS = keyword_pattern([
    "BASH", "BASHOPTS", "BASH_ALIASES", "BASH_ARGC", "BASH_ARGV", "BASH_CMDS",
    "BASH_COMPLETION_COMPAT_DIR", "BASH_LINENO", "BASH_REMATCH", "BASH_SOURCE",
    "BASH_VERSINFO", "BASH_VERSION", "COLORTERM", "COLUMNS", "COMP_WORDBREAKS",
    "DBUS_SESSION_BUS_ADDRESS", "DEFAULTS_PATH", "DESKTOP_SESSION", "DIRSTACK", "DISPLAY",
    "EUID", "GDMSESSION", "GDM_LANG", "GNOME_KEYRING_CONTROL", "GNOME_KEYRING_PID",
    "GPG_AGENT_INFO", "GROUPS", "HISTCONTROL", "HISTFILE", "HISTFILESIZE", "HISTSIZE",
    "HOME", "HOSTNAME", "HOSTTYPE", "IFS", "INSTANCE", "JOB", "LANG", "LANGUAGE",
    "LC_ADDRESS", "LC_ALL", "LC_IDENTIFICATION", "LC_MEASUREMENT", "LC_MONETARY",
    "LC_NAME", "LC_NUMERIC", "LC_PAPER", "LC_TELEPHONE", "LC_TIME", "LESSCLOSE",
    "LESSOPEN", "LINES", "LOGNAME", "LS_COLORS", "MACHTYPE", "MAILCHECK",
    "MANDATORY_PATH", "NO_AT_BRIDGE", "OLDPWD", "OPTERR", "OPTIND", "ORBIT_SOCKETDIR",
    "OSTYPE", "PAPERSIZE", "PATH", "PIPESTATUS", "PPID", "PS1", "PS2", "PS3", "PS4", "PWD",
    "RANDOM", "REPLY", "SECONDS", "SELINUX_INIT", "SESSION", "SESSIONTYPE",
    "SESSION_MANAGER", "SHELL", "SHELLOPTS", "SHLVL", "SSH_AUTH_SOCK", "TERM", "UID",
    "UPSTART_EVENTS", "UPSTART_INSTANCE", "UPSTART_JOB", "UPSTART_SESSION", "USER",
    "WINDOWID", "XAUTHORITY", "XDG_CONFIG_DIRS", "XDG_CURRENT_DESKTOP", "XDG_DATA_DIRS",
    "XDG_GREETER_DATA_DIR", "XDG_MENU_PREFIX", "XDG_RUNTIME_DIR", "XDG_SEAT",
    "XDG_SEAT_PATH", "XDG_SESSION_DESKTOP", "XDG_SESSION_ID", "XDG_SESSION_PATH",
    "XDG_SESSION_TYPE", "XDG_VTNR", "XMODIFIERS",
])

COMMANDS = [
    "add", "apropos", "apt", "aptitude", "apt-cache", "apt-get", "aspell",
    "automysqlbackup", "awk", "basename", "bash", "bc", "bconsole", "bg", "bzip2", "cal",
    "cat", "cfdisk", "chgrp", "chkconfig", "chmod", "chown", "chroot", "cksum", "clear",
    "cmp", "column", "comm", "composer", "cp", "cron", "crontab", "csplit", "curl", "cut",
    "date", "dc", "dd", "ddrescue", "debootstrap", "df", "diff", "diff3", "dig", "dir",
    "dircolors", "dirname", "dirs", "dmesg", "du", "egrep", "eject", "env", "ethtool",
    "expand", "expect", "expr", "fdformat", "fdisk", "fg", "fgrep", "file", "find", "fmt",
    "fold", "format", "free", "fsck", "ftp", "fuser", "gawk", "git", "gparted", "grep",
    "groupadd", "groupdel", "groupmod", "groups", "grub-mkconfig", "gzip", "halt", "head",
    "hg", "history", "host", "hostname", "htop", "iconv", "id", "ifconfig", "ifdown",
    "ifup", "import", "ip", "jobs", "join", "kill", "killall", "less", "link", "ln",
    "locate", "logname", "logrotate", "look", "lpc", "lpr", "lprint", "lprintd", "lprintq",
    "lprm", "ls", "lsof", "lynx", "make", "man", "mc", "mdadm", "mkconfig", "mkdir",
    "mke2fs", "mkfifo", "mkfs", "mkisofs", "mknod", "mkswap", "mmv", "more", "most",
    "mount", "mtools", "mtr", "mutt", "mv", "nano", "nc", "netstat", "nice", "nl", "nohup",
    "notify-send", "npm", "nslookup", "op", "open", "parted", "passwd", "paste",
    "pathchk", "ping", "pkill", "pnpm", "popd", "pr", "printcap", "printenv", "ps",
    "pushd", "pv", "quota", "quotacheck", "quotactl", "ram", "rar", "rcp", "reboot",
    "remsync", "rename", "renice", "rev", "rm", "rmdir", "rpm", "rsync", "scp", "screen",
    "sdiff", "sed", "sendmail", "seq", "service", "sftp", "sh", "shellcheck", "shuf",
    "shutdown", "sleep", "slocate", "sort", "split", "ssh", "stat", "strace", "su", "sudo",
    "sum", "suspend", "swapon", "sync", "tac", "tail", "tar", "tee", "time", "timeout",
    "top", "touch", "tr", "traceroute", "tsort", "tty", "umount", "uname", "unexpand",
    "uniq", "units", "unrar", "unshar", "unzip", "update-grub", "uptime", "useradd",
    "userdel", "usermod", "users", "uudecode", "uuencode", "v", "vdir", "vi", "vim",
    "virsh", "vmstat", "wait", "watch", "wc", "wget", "whereis", "which", "who", "whoami",
    "write", "xargs", "xdg-open", "yarn", "yes", "zenity", "zip", "zsh", "zypper",
]

EXTRA_COMMANDS = ["nelua", "luarocks", "pacman"]

KEYWORDS = [
    "if", "then", "else", "elif", "fi", "for", "while", "in", "case", "esac", "function",
    "select", "do", "done", "until",
]

BUILTINS = [
    ".", ":", "break", "cd", "continue", "eval", "exec", "exit", "export", "getopts",
    "hash", "pwd", "readonly", "return", "shift", "test", "times", "trap", "umask", "unset",
    "alias", "bind", "builtin", "caller", "command", "declare", "echo", "enable", "help",
    "let", "local", "logout", "mapfile", "printf", "read", "readarray", "source", "type",
    "typeset", "ulimit", "unalias", "set", "shopt",
]

# A command word starts a line or follows a separator and ends at one
COMMAND_START = r"(^|[\s;|&]|[<>]\()"
COMMAND_END = r"(?=$|[)\s;|&])"


def command_word(words: list[str], **options) -> dict:
    return {
        "pattern": keyword_pattern(words, prefix=COMMAND_START, suffix=COMMAND_END),
        "lookbehind": True,
        **options,
    }


VARIABLE = [
    # Arithmetic expansion
    {
        "pattern": r"\$?\(\([\s\S]+?\)\)",
        "greedy": True,
        "inside": {
            # With a leading $ the (( and )) are part of the variable
            "variable": [
                {"pattern": r"(^\$\(\([\s\S]+)\)\)", "lookbehind": True},
                r"^\$\(\(",
            ],
            "number": r"\b0x[\dA-Fa-f]+\b|(?:\b\d+\.?\d*|\B\.\d+)(?:[Ee]-?\d+)?",
            "operator": r"--?|-=|\+\+?|\+=|!=?|~|\*\*?|\*=|\/=?|%=?|<<=?|>>=?|<=?|>=?|==?"
            r"|&&?|&=|\^=?|\|\|?|\|=|\?|:",
            "punctuation": r"\(\(?|\)\)?|,|;",
        },
    },
    # Command substitution
    {
        "pattern": r"\$\((?:\([^)]+\)|[^()])+\)|`[^`]+`",
        "greedy": True,
        "inside": GrammarRef(SUBSTITUTION),
    },
    # Brace expansion
    {
        "pattern": r"\$\{[^}]+\}",
        "greedy": True,
        "inside": {
            "operator": r":[-=?+]?|[!\/]|##?|%%?|\^\^?|,,?",
            "punctuation": r"[\[\]]",
            "environment": {"pattern": r"(\{)" + ENV_VARS, "lookbehind": True, "alias": "constant"},
        },
    },
    r"\$(?:\w+|[#?*!@$])",
]

# Interpolation inside double-quoted strings and here-documents
INSIDE_STRING = {
    "environment": {"pattern": r"\$" + ENV_VARS, "alias": "constant"},
    "variable": VARIABLE,
    # Escape sequences from echo and printf, and escaped quotes
    "entity": r"""\\(?:[abceEfnrtv\\"]|O?[0-7]{1,3}|x[0-9a-fA-F]{1,2}|u[0-9a-fA-F]{4}|U[0-9a-fA-F]{8})""",
}

# Tokens re-entered inside command substitution, in priority order
SUBSTITUTION_TOKENS = [
    "comment", "function-name", "for-or-select", "assign-left", "string", "environment",
    "function", "keyword", "builtin", "boolean", "file-descriptor", "operator",
    "punctuation", "number",
]


def grammar() -> Grammar:
    return Grammar.from_mapping(
        {
            "shebang": {"pattern": r"^#!\s*\/.*", "alias": "important"},
            "comment": {"pattern": r"""(^|[^"{\\$])#.*""", "lookbehind": True},
            "function-name": [
                # function foo {  and  function foo() {
                {
                    "pattern": r"(\bfunction\s+)\w+(?=(?:\s*\(\s*\))?\s*\{)",
                    "lookbehind": True,
                    "alias": "function",
                },
                # foo() {
                {"pattern": r"\b\w+(?=\s*\(\s*\)\s*\{)", "alias": "function"},
            ],
            # Loop variables of for and select
            "for-or-select": {
                "pattern": r"(\b(?:for|select)\s+)\w+(?=\s+in\s)",
                "alias": "variable",
                "lookbehind": True,
            },
            # Left-hand side of = and +=
            "assign-left": {
                "pattern": COMMAND_START + r"\w+(?=\+?=)",
                "inside": {
                    "environment": {
                        "pattern": COMMAND_START + ENV_VARS,
                        "lookbehind": True,
                        "alias": "constant",
                    },
                },
                "alias": "variable",
                "lookbehind": True,
            },
            "string": [
                # Here-document
                {
                    "pattern": r"((?:^|[^<])<<-?\s*)(\w+?)\s*(?:\r?\n|\r)[\s\S]*?(?:\r?\n|\r)\2",
                    "lookbehind": True,
                    "greedy": True,
                    "inside": INSIDE_STRING,
                },
                # Here-document with a quoted tag: no expansion
                {
                    "pattern": r"""((?:^|[^<])<<-?\s*)(["'])(\w+)\2\s*(?:\r?\n|\r)[\s\S]*?(?:\r?\n|\r)\3""",
                    "lookbehind": True,
                    "greedy": True,
                },
                {
                    "pattern": r"""(^|[^\\](?:\\\\)*)(["'])(?:\\[\s\S]|\$\([^)]+\)|`[^`]+`|(?!\2)[^\\])*\2""",
                    "lookbehind": True,
                    "greedy": True,
                    "inside": INSIDE_STRING,
                },
            ],
            "environment": {"pattern": r"\$?" + ENV_VARS, "alias": "constant"},
            "variable": VARIABLE,
            "function": command_word(COMMANDS),
            "extra-functions": command_word(EXTRA_COMMANDS, alias="function"),
            "keyword": command_word(KEYWORDS),
            "builtin": command_word(BUILTINS, alias="class-name"),
            "boolean": command_word(["true", "false"]),
            "file-descriptor": {"pattern": r"\B&\d\b", "alias": "important"},
            "operator": {
                # Mostly redirections
                "pattern": r"\d?<>|>\||\+=|==?|!=?|=~|<<[<-]?|[&\d]?>>|\d?[<>]&?|&[>&]?|\|[&|]?|<=?|>=?",
                "inside": {"file-descriptor": {"pattern": r"^\d", "alias": "important"}},
            },
            "punctuation": r"\$?\(\(?|\)\)?|\.\.|[{}[\];\\]",
            "number": {"pattern": r"(^|\s)(?:[1-9]\d*|0)(?:[.,]\d+)?\b", "lookbehind": True},
        }
    )


def substitution_grammar(bash: Grammar) -> Grammar:
    entries = [("variable", (Rule(r"^\$\(|^`|\)$|`$"),))]
    entries.extend((name, bash[name]) for name in SUBSTITUTION_TOKENS)
    return Grammar(entries)


def register(registry) -> None:
    bash = registry.define("bash", grammar())
    registry.define(SUBSTITUTION, substitution_grammar(bash))
    registry.alias("shell", "bash")
