import argparse
import os
import sys
import textwrap

import requests

from . import config
from .errors import MyGitError
from .logger import configure_structlog
from .remote import push
from .repository import Repository


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="mygit", description="A simple git-like VCS")
    commands = parser.add_subparsers(dest="command", required=True)

    init_parser = commands.add_parser("init", help="Initialize a new repository")
    init_parser.set_defaults(func=init)

    add_parser = commands.add_parser("add", help="Stage files for commit")
    add_parser.set_defaults(func=add)
    add_parser.add_argument("paths", nargs="+")

    commit_parser = commands.add_parser("commit", help="Commit staged changes")
    commit_parser.set_defaults(func=commit)
    commit_parser.add_argument("-m", "--message", required=True)

    log_parser = commands.add_parser("log", help="Display commit history")
    log_parser.set_defaults(func=log)

    push_parser = commands.add_parser("push", help="Push objects to a remote server")
    push_parser.set_defaults(func=push_command)
    push_parser.add_argument("-r", "--repo-name", required=True)
    push_parser.add_argument("--url", default=None, help=f"Remote base URL (default: {config.REMOTE_URL})")

    return parser.parse_args(argv)


def init(args):
    repo, reinitialized = Repository.init()
    if reinitialized:
        print(f"Reinitialized existing mygit repository in {repo.git_dir}")
    else:
        print(f"Initialized empty mygit repository in {repo.git_dir}")
    return 0


def add(args):
    repo = Repository.open()
    status = 0
    for path in args.paths:
        staged = repo.add(path)
        if not staged:
            if os.path.exists(os.path.join(repo.work_tree, path)):
                print(f"Nothing to stage in {path}")
            else:
                print(f"File not found: {path}", file=sys.stderr)
                status = 1
        for rel_path in staged:
            print(f"Staged {rel_path}")
    return status


def commit(args):
    repo = Repository.open()
    oid = repo.commit(args.message)
    if oid is None:
        print("Nothing to commit, working tree clean.")
        return 0
    branch = repo.refs.current_branch() or "detached"
    print(f"[{branch} {oid[:7]}] {args.message}")
    return 0


def log(args):
    repo = Repository.open()
    if not repo.head():
        print("No commits yet.")
        return 0
    for record in repo.log():
        print(f"commit {record.oid}")
        print(f"Author: {record.author}")
        print(f"Date:   {record.date}")
        print()
        print(textwrap.indent(record.message.strip(), "    "))
        print()
    return 0


def push_command(args):
    repo = Repository.open()
    result = push(repo, args.repo_name, url=args.url)
    if result is None:
        print("Nothing to push (no HEAD).")
        return 0
    print(f"Pushed {result.get('received', 0)} objects to {args.repo_name}: {result.get('status')}")
    return 0


def main(argv=None):
    configure_structlog()
    args = parse_args(argv)
    try:
        return args.func(args)
    except (MyGitError, OSError, requests.RequestException) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
