"""Integration tests binding realistic records to command trees."""

#  Copyright (c) 2025 Tom Villani, Ph.D.

from dataclasses import dataclass, field
from typing import Optional

import pytest

from flagbind import Binder, Command, CommandError, bind, flag
from flagbind.types import Float64


@dataclass
class Kubernetes:
    File: Optional[str] = flag(None, shorthand="f", usage="that contains the configuration to apply")
    Namespace: str = field(
        default="", metadata={"shorthand": "n", "flagbind": "If present, the namespace scope for this CLI request"}
    )


@dataclass
class GlobalOptions:
    Namespace: str = flag("", shorthand="n", persistent=True, usage="If present, the namespace scope for this CLI request")


@dataclass
class ApplyOptions:
    File: Optional[str] = flag(None, shorthand="f", usage="that contains the configuration to apply")


@dataclass
class PersonBody:
    Height: int = flag(0, shorthand="h")
    Weight: Float64 = flag(Float64(0.0), shorthand="w")


@dataclass
class Person:
    Name: str = field(default="", metadata={"shorthand": "n", "usage": "person name", "flagbind": "required p"})
    Age: int = 0
    Gender: Optional[str] = None
    Body: PersonBody = field(default_factory=PersonBody)


@dataclass
class Query:
    Labels: dict[str, str] = flag(default_factory=dict, shorthand="l")


@pytest.mark.integration
@pytest.mark.cli
class TestKubectlExamples:
    """Test the kubectl-style examples end to end."""

    def test_bind_single_record(self):
        """Test binding one record and parsing shorthands."""
        kubectl = Command("kubectl")
        kubernetes = Kubernetes()
        bind(kubectl, kubernetes)

        kubectl.parse_flags(["-n", "app", "-f", "pod.yaml"])
        assert (kubernetes.Namespace, kubernetes.File) == ("app", "pod.yaml")

    def test_free_text_attributes_ignored(self):
        """Test that an attribute list of unknown words sets no attribute."""
        kubectl = Command("kubectl")
        bind(kubectl, Kubernetes())
        action = kubectl.flags().lookup("namespace")
        assert action.required is False
        assert "namespace" not in kubectl.persistent_flags()

    def test_binder_with_several_records(self):
        """Test that records bound through one binder share a namespace."""
        kubectl = Command("kubectl")
        global_options = GlobalOptions()
        apply_options = ApplyOptions()

        binder = Binder.new(kubectl)
        binder.bind(global_options)
        binder.bind(apply_options)

        kubectl.parse_flags(["-n", "app", "-f", "pod.yaml"])
        assert (global_options.Namespace, apply_options.File) == ("app", "pod.yaml")

    def test_sub_command_tree(self):
        """Test persistent options reaching a sub-command's run function."""
        applied = []
        kubectl = Command("kubectl")
        apply = Command("apply", short="Apply a configuration", run=lambda cmd, args: applied.append(args))
        kubectl.add_command(apply)

        global_options = GlobalOptions()
        apply_options = ApplyOptions()
        bind(kubectl, global_options)
        bind(apply, apply_options)

        kubectl.execute(["-n", "prod", "apply", "-f", "pod.yaml", "extra"])
        assert global_options.Namespace == "prod"
        assert apply_options.File == "pod.yaml"
        assert applied == [["extra"]]

    def test_sub_command_option_not_on_root(self):
        """Test that a sub-command's local options are rejected on the root."""
        kubectl = Command("kubectl")
        apply = Command("apply")
        kubectl.add_command(apply)
        bind(apply, ApplyOptions())

        with pytest.raises(CommandError):
            kubectl.execute(["-f", "pod.yaml"])


@pytest.mark.integration
@pytest.mark.cli
class TestPersonExample:
    """Test a record mixing attributes, optionals and nested records."""

    def test_parse_all(self):
        """Test every field of the record."""
        root = Command("people")
        person = Person()
        bind(root, person)

        root.parse_flags(["-n", "ann", "--age", "31", "--gender", "f", "-h", "170", "-w", "61.5"])
        assert person == Person(Name="ann", Age=31, Gender="f", Body=PersonBody(Height=170, Weight=61.5))

    def test_required_name(self):
        """Test that the required persistent name is enforced on sub-commands."""
        root = Command("people")
        show = Command("show")
        root.add_command(show)
        bind(root, Person())

        with pytest.raises(CommandError, match="--name"):
            root.execute(["show"])

    def test_help_without_shorthand(self):
        """Test that --help is still available when -h is taken."""
        root = Command("people")
        bind(root, Person())
        parser = root.build_parser()
        assert parser._option_string_actions["-h"].dest == "height"
        assert "--help" in parser._option_string_actions

    def test_labels(self):
        """Test a string map option."""
        root = Command("query")
        query = Query()
        bind(root, query)

        root.parse_flags(["-l", "a=b", "-l", "c=d"])
        assert query.Labels == {"a": "b", "c": "d"}
