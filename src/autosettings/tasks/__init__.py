"""
Task collection for the autosettings command line.

Modules are collected with Collection.from_module() and flattened into one
namespace, served by main() as the ``autosettings`` program.
"""

from invoke import Collection, Program

from . import config_show

namespace = Collection()

for submodule in [config_show]:
    submodule_collection = Collection.from_module(submodule)
    for task_name, task in submodule_collection.tasks.items():
        namespace.add_task(task)

program = Program(namespace=namespace, name='autosettings', binary='autosettings', version='0.1.0')


def main():
    program.run()
