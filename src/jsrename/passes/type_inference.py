"""
Type Inference Pass

Flow-insensitive unification over every Program of a collection. Each
expression node gets a TypeNode; two expressions end up in the same
equivalence class when the program may move a value from one to the other.
Property accesses hang off their base's class, so "same property of the
same kind of object" becomes a union-find query.

Expression visits report whether the result is certainly primitive
(numbers, strings, booleans). Assigning a primitive never unifies, which
keeps unrelated counters and flags from collapsing into one type. Visits
in void context (value discarded) skip unification of the result.

Method receivers are resolved after the traversal: every `obj.m(...)`
records (type of obj, `this` of obj.m) as a potential method pair, unified
only when neither side looks like a namespace, i.e. an object holding
constructors (it was used with `new` or had its `.prototype` accessed).
"""

import logging
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Union

from ..shared.ast_utils import iter_programs, walk
from ..shared.errors import NonStringPropertyError, UnsupportedNodeError
from ..shared.nodes import Identifier, Literal, Node
from ..utils.config import (
    ARGUMENTS_BINDING, ARRAY_ELEMENT_PROPERTY, COMPUTED_PROPERTY_KEY,
    PROTOTYPE_PROPERTY, RETURN_BINDING, THIS_BINDING, UNDEFINED_NAME,
)
from .type_graph import TypeGraph, TypeNode, TypeUnifier

logger = logging.getLogger("jsrename.passes.type_inference")

PRIMITIVE = True
NOT_PRIMITIVE = False

VOID = True
NOT_VOID = False

Typed = Union[Node, TypeNode]


class InferenceContext:
    """
    Traversal state of one inference run.

    The environment stack holds one name -> TypeNode map per function or
    catch scope. Its bottom entry is the top level, where only `this` is
    bound (to the global object); every other top-level name is a property
    of the global object.
    """

    def __init__(self) -> None:
        self.graph = TypeGraph()
        self.unifier = TypeUnifier()
        self.global_type: TypeNode = self.graph.new_node()
        self.env_stack: List[Dict[str, TypeNode]] = [{THIS_BINDING: self.global_type}]
        self.potential_methods: List[Tuple[TypeNode, TypeNode]] = []

    @property
    def env(self) -> Dict[str, TypeNode]:
        return self.env_stack[-1]

    def get_var(self, name: str) -> TypeNode:
        for env in reversed(self.env_stack):
            t = env.get(name)
            if t is not None:
                return t
        return self.global_type.get_prty(name)

    def add_var(self, name: str) -> TypeNode:
        """Bind `name` in the innermost scope unless it is bound there already."""
        if not isinstance(name, str):
            raise NonStringPropertyError(name)
        t = self.env.get(name)
        if t is None:
            t = self.env[name] = self.graph.new_node()
        return t

    @contextmanager
    def scope(self, scope_node: Node) -> Iterator[Dict[str, TypeNode]]:
        env: Dict[str, TypeNode] = {}
        scope_node.env_type = env
        self.env_stack.append(env)
        try:
            yield env
        finally:
            self.env_stack.pop()

    def type_of(self, node: Typed) -> TypeNode:
        """Type of an expression node, created on first use. Identity on TypeNodes."""
        if isinstance(node, TypeNode):
            return node
        if node.type_node is None:
            node.type_node = self.graph.new_node()
        return node.type_node

    def unify(self, x: Typed, *others: Typed) -> None:
        t = self.type_of(x)
        for other in others:
            self.unifier.unify(t, self.type_of(other))

    def add_potential_method(self, base: Typed, receiver: Typed) -> None:
        self.potential_methods.append((self.type_of(base), self.type_of(receiver)))

    def mark_as_namespace(self, node: Typed) -> None:
        self.type_of(node).rep().namespace = True

    def mark_as_constructor(self, node: Node) -> None:
        """`node` holds a constructor: it is a namespace, and so is the object it was read from."""
        self.mark_as_namespace(node)
        if node.type == "MemberExpression":
            self.mark_as_namespace(node.object)


class TypeInferencer:
    """
    Mutually recursive statement, expression and function visitors,
    dispatched on `node.type` over the closed ES5 node set.
    """

    def __init__(self, ctx: InferenceContext):
        self.ctx = ctx
        self._statements: Dict[str, Callable[[Node], None]] = {
            "EmptyStatement": self._visit_nothing,
            "DebuggerStatement": self._visit_nothing,
            "BreakStatement": self._visit_nothing,
            "ContinueStatement": self._visit_nothing,
            "BlockStatement": self._visit_block,
            "ExpressionStatement": self._visit_expression_statement,
            "IfStatement": self._visit_if,
            "LabeledStatement": self._visit_labeled,
            "WithStatement": self._visit_with,
            "SwitchStatement": self._visit_switch,
            "ReturnStatement": self._visit_return,
            "ThrowStatement": self._visit_throw,
            "TryStatement": self._visit_try,
            "CatchClause": self._visit_catch,
            "WhileStatement": self._visit_while,
            "DoWhileStatement": self._visit_do_while,
            "ForStatement": self._visit_for,
            "ForInStatement": self._visit_for_in,
            "FunctionDeclaration": self._visit_function_declaration,
            "VariableDeclaration": self._visit_variable_declaration,
        }
        self._expressions: Dict[str, Callable[[Node, bool], bool]] = {
            "FunctionExpression": self._visit_function_expression,
            "ThisExpression": self._visit_this,
            "ArrayExpression": self._visit_array,
            "ObjectExpression": self._visit_object,
            "SequenceExpression": self._visit_sequence,
            "UnaryExpression": self._visit_unary,
            "BinaryExpression": self._visit_binary,
            "AssignmentExpression": self._visit_assignment,
            "UpdateExpression": self._visit_update,
            "LogicalExpression": self._visit_logical,
            "ConditionalExpression": self._visit_conditional,
            "CallExpression": self._visit_call,
            "NewExpression": self._visit_call,
            "MemberExpression": self._visit_member,
            "Identifier": self._visit_identifier,
            "Literal": self._visit_literal,
        }

    # =========================================================================
    # ENTRY POINTS
    # =========================================================================

    def visit_root(self, node: Node) -> None:
        if node.type == "Program":
            for stmt in node.body:
                self.visit_stmt(stmt)
        elif node.type == "ProgramCollection":
            for program in node.programs:
                self.visit_root(program)
        else:
            raise UnsupportedNodeError(node.type, context="root")

    def resolve_receivers(self) -> int:
        """Unify potential method pairs where neither side is a namespace."""
        self.ctx.unifier.complete()
        unified = 0
        for base, receiver in self.ctx.potential_methods:
            base, receiver = base.rep(), receiver.rep()
            if not base.namespace and not receiver.namespace:
                # queued, so the order of the pair list alone decides the result
                self.ctx.unifier.unify_later(base, receiver)
                unified += 1
        self.ctx.unifier.complete()
        return unified

    def visit_stmt(self, node: Optional[Node]) -> None:
        if node is None:
            return
        visitor = self._statements.get(node.type)
        if visitor is None:
            raise UnsupportedNodeError(node.type, context="statement")
        visitor(node)

    def visit_exp(self, node: Optional[Node], void_ctx: bool) -> Optional[bool]:
        """Visit an expression; returns PRIMITIVE or NOT_PRIMITIVE (None for a missing node)."""
        if node is None:
            return None
        visitor = self._expressions.get(node.type)
        if visitor is None:
            raise UnsupportedNodeError(node.type, context="expression")
        return visitor(node, void_ctx)

    def visit_function(self, fun: Node, is_expression: bool) -> None:
        ctx = self.ctx
        with ctx.scope(fun):
            for param in fun.params:
                param.type_node = ctx.add_var(param.name)
            for name in fun.env:  # hoisted var and function declarations
                ctx.add_var(name)
            if is_expression and fun.id is not None:
                ctx.unify(fun, ctx.add_var(fun.id.name))
                fun.id.type_node = ctx.type_of(fun)
            this_type = ctx.add_var(THIS_BINDING)
            return_type = ctx.add_var(RETURN_BINDING)
            ctx.add_var(ARGUMENTS_BINDING)
            # the function value remembers its receiver and result
            fun_type = ctx.type_of(fun)
            ctx.unify(fun_type.get_prty(THIS_BINDING), this_type)
            ctx.unify(fun_type.get_prty(RETURN_BINDING), return_type)
            self.visit_stmt(fun.body)

    # =========================================================================
    # STATEMENTS
    # =========================================================================

    def _visit_nothing(self, node: Node) -> None:
        pass

    def _visit_block(self, node: Node) -> None:
        for stmt in node.body:
            self.visit_stmt(stmt)

    def _visit_expression_statement(self, node: Node) -> None:
        self.visit_exp(node.expression, VOID)

    def _visit_if(self, node: Node) -> None:
        self.visit_exp(node.test, VOID)
        self.visit_stmt(node.consequent)
        self.visit_stmt(node.alternate)

    def _visit_labeled(self, node: Node) -> None:
        self.visit_stmt(node.body)

    def _visit_with(self, node: Node) -> None:
        self.visit_exp(node.object, NOT_VOID)
        self.visit_stmt(node.body)

    def _visit_switch(self, node: Node) -> None:
        primitive = self.visit_exp(node.discriminant, NOT_VOID)
        for case in node.cases:
            self.visit_exp(case.test, VOID if primitive else NOT_VOID)
            for stmt in case.consequent:
                self.visit_stmt(stmt)

    def _visit_return(self, node: Node) -> None:
        if node.argument is not None:
            self.visit_exp(node.argument, NOT_VOID)
            self.ctx.unify(node.argument, self.ctx.get_var(RETURN_BINDING))

    def _visit_throw(self, node: Node) -> None:
        self.visit_exp(node.argument, VOID)

    def _visit_try(self, node: Node) -> None:
        self.visit_stmt(node.block)
        self.visit_stmt(node.handler)
        self.visit_stmt(node.finalizer)

    def _visit_catch(self, node: Node) -> None:
        with self.ctx.scope(node):
            node.param.type_node = self.ctx.add_var(node.param.name)
            self.visit_stmt(node.body)

    def _visit_while(self, node: Node) -> None:
        self.visit_exp(node.test, VOID)
        self.visit_stmt(node.body)

    def _visit_do_while(self, node: Node) -> None:
        self.visit_stmt(node.body)
        self.visit_exp(node.test, VOID)

    def _visit_for(self, node: Node) -> None:
        if node.init is not None and node.init.type == "VariableDeclaration":
            self.visit_stmt(node.init)
        else:
            self.visit_exp(node.init, VOID)
        self.visit_exp(node.test, VOID)
        self.visit_exp(node.update, VOID)
        self.visit_stmt(node.body)

    def _visit_for_in(self, node: Node) -> None:
        if node.left.type == "VariableDeclaration":
            self.visit_stmt(node.left)
        else:
            self.visit_exp(node.left, VOID)
        self.visit_exp(node.right, NOT_VOID)
        self.visit_stmt(node.body)

    def _visit_function_declaration(self, node: Node) -> None:
        self.visit_function(node, is_expression=False)
        self.ctx.unify(node, self.ctx.get_var(node.id.name))

    def _visit_variable_declaration(self, node: Node) -> None:
        ctx = self.ctx
        for decl in node.declarations:
            binding = ctx.get_var(decl.id.name)
            if decl.init is not None:
                if not self.visit_exp(decl.init, NOT_VOID):
                    ctx.unify(binding, decl.init)
            decl.id.type_node = binding

    # =========================================================================
    # EXPRESSIONS
    # =========================================================================

    def _visit_function_expression(self, node: Node, void_ctx: bool) -> bool:
        self.visit_function(node, is_expression=True)
        return NOT_PRIMITIVE

    def _visit_this(self, node: Node, void_ctx: bool) -> bool:
        self.ctx.unify(node, self.ctx.get_var(THIS_BINDING))
        return NOT_PRIMITIVE

    def _visit_array(self, node: Node, void_ctx: bool) -> bool:
        element_type = self.ctx.type_of(node).get_prty(ARRAY_ELEMENT_PROPERTY)
        for element in node.elements:
            if element is None:
                continue
            self.visit_exp(element, NOT_VOID)
            self.ctx.unify(element_type, element)
        return NOT_PRIMITIVE

    def _visit_object(self, node: Node, void_ctx: bool) -> bool:
        ctx = self.ctx
        typ = ctx.type_of(node)
        for prop in node.properties:
            name = property_key_name(prop.key)
            if prop.kind == "init":
                self.visit_exp(prop.value, NOT_VOID)
                if name is not None:
                    ctx.unify(typ.get_prty(name), prop.value)
            elif prop.kind in ("get", "set"):
                accessor = prop.value
                self.visit_function(accessor, is_expression=False)
                if name is None:
                    continue
                if prop.kind == "get":
                    ctx.unify(typ.get_prty(name), accessor.env_type[RETURN_BINDING])
                elif accessor.params:
                    ctx.unify(typ.get_prty(name), accessor.env_type[accessor.params[0].name])
                ctx.unify(typ, accessor.env_type[THIS_BINDING])
            else:
                raise UnsupportedNodeError(prop.kind, context="property kind")
        return NOT_PRIMITIVE

    def _visit_sequence(self, node: Node, void_ctx: bool) -> bool:
        *init, last = node.expressions
        for expr in init:
            self.visit_exp(expr, VOID)
        primitive = self.visit_exp(last, void_ctx)
        self.ctx.unify(node, last)
        return primitive

    def _visit_unary(self, node: Node, void_ctx: bool) -> bool:
        self.visit_exp(node.argument, VOID)
        return PRIMITIVE

    def _visit_binary(self, node: Node, void_ctx: bool) -> bool:
        self.visit_exp(node.left, VOID)
        self.visit_exp(node.right, VOID)
        return PRIMITIVE

    def _visit_assignment(self, node: Node, void_ctx: bool) -> bool:
        self.visit_exp(node.left, NOT_VOID)
        primitive = self.visit_exp(node.right, NOT_VOID)
        if node.operator != "=":
            return PRIMITIVE  # compound assignment operators
        if not primitive:
            self.ctx.unify(node, node.left, node.right)
        return primitive

    def _visit_update(self, node: Node, void_ctx: bool) -> bool:
        self.visit_exp(node.argument, VOID)
        return PRIMITIVE

    def _visit_logical(self, node: Node, void_ctx: bool) -> bool:
        if node.operator == "&&":
            self.visit_exp(node.left, VOID)
            primitive = self.visit_exp(node.right, void_ctx)
            self.ctx.unify(node, node.right)
            return primitive
        if node.operator == "||":
            p1 = self.visit_exp(node.left, void_ctx)
            p2 = self.visit_exp(node.right, void_ctx)
            if not void_ctx:
                self.ctx.unify(node, node.left, node.right)
            return p1 and p2
        raise UnsupportedNodeError(node.operator, context="logical operator")

    def _visit_conditional(self, node: Node, void_ctx: bool) -> bool:
        self.visit_exp(node.test, VOID)
        p1 = self.visit_exp(node.consequent, void_ctx)
        p2 = self.visit_exp(node.alternate, void_ctx)
        if not void_ctx:
            self.ctx.unify(node, node.consequent, node.alternate)
        return p1 and p2

    def _visit_call(self, node: Node, void_ctx: bool) -> bool:
        """
        Calls and `new`. A function literal callee is connected directly:
        arguments to parameters, the call to its return type and its `this`
        to the new object (or to the global object for a plain call). Any
        other callee only reaches its receiver through the function value's
        `@this` property.
        """
        ctx = self.ctx
        callee = node.callee
        is_new = node.type == "NewExpression"
        self.visit_exp(callee, NOT_VOID)
        for arg in node.arguments:
            self.visit_exp(arg, NOT_VOID)

        if callee.type == "FunctionExpression":
            env = callee.env_type
            for arg, param in zip(node.arguments, callee.params):
                ctx.unify(arg, env[param.name])
            ctx.unify(node, env[RETURN_BINDING])
            ctx.unify(env[THIS_BINDING], node if is_new else ctx.global_type)
        elif is_new:
            ctx.unify(node, ctx.type_of(callee).get_prty(THIS_BINDING))

        if callee.type == "MemberExpression":
            ctx.add_potential_method(callee.object, ctx.type_of(callee).get_prty(THIS_BINDING))
        if is_new:
            ctx.mark_as_constructor(callee)
        return NOT_PRIMITIVE

    def _visit_member(self, node: Node, void_ctx: bool) -> bool:
        ctx = self.ctx
        self.visit_exp(node.object, NOT_VOID)
        base = ctx.type_of(node.object)
        prop = node.property
        if node.computed:
            self.visit_exp(prop, VOID)
            if not (isinstance(prop, Literal) and prop.is_string):
                # unknown key: remember which object it indexes instead of guessing
                ctx.unify(ctx.type_of(prop).get_prty(COMPUTED_PROPERTY_KEY), node.object)
                return NOT_PRIMITIVE
            name = prop.value
        else:
            name = prop.name
        ctx.unify(node, base.get_prty(name))
        if name == PROTOTYPE_PROPERTY:
            ctx.mark_as_constructor(node.object)
        return NOT_PRIMITIVE

    def _visit_identifier(self, node: Node, void_ctx: bool) -> bool:
        if node.name == UNDEFINED_NAME:
            return PRIMITIVE
        self.ctx.unify(node, self.ctx.get_var(node.name))
        return NOT_PRIMITIVE

    def _visit_literal(self, node: Node, void_ctx: bool) -> bool:
        return PRIMITIVE


def property_key_name(key: Node) -> Optional[str]:
    """Name of an object-literal key, or None for numeric keys."""
    if isinstance(key, Identifier):
        return key.name
    if isinstance(key, Literal) and key.is_string:
        return key.value
    return None


def clear_annotations(root: Node) -> None:
    """Drop `type_node`/`env_type` left over from a previous run."""
    for program in iter_programs(root):
        for node in walk(program):
            node.type_node = None
            node.env_type = None


def infer_types(root: Node) -> InferenceContext:
    """
    Run inference over a Program or ProgramCollection from scratch.

    Afterwards `root.global_type` is the global object's TypeNode and
    `root.type_graph` the arena every TypeNode of this run lives in.
    """
    clear_annotations(root)
    ctx = InferenceContext()
    inferencer = TypeInferencer(ctx)
    inferencer.visit_root(root)
    unified = inferencer.resolve_receivers()

    root.global_type = ctx.global_type
    root.type_graph = ctx.graph
    logger.debug(
        f"inferred {sum(1 for _ in iter_programs(root))} programs: {len(ctx.graph)} type nodes, "
        f"{len(ctx.potential_methods)} potential methods, {unified} receivers unified"
    )
    return ctx


def expression_type(root: Node, node: Node) -> TypeNode:
    """Type of `node` from the last run over `root`; fresh for nodes inference never reached."""
    if node.type_node is None:
        node.type_node = root.type_graph.new_node()
    return node.type_node
