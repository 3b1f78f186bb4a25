"""
动作注册表与元数据:
- 以 name 作为键注册动作函数
- 绑定 params_model (Pydantic v2) 用于参数校验
- 提供 validate_step() 在执行前做强校验
- 提供 verify() 在启动时确认一组固定动作名都有实现

编排层只依赖 ActionRegistry 这一契约；内置动作通过 @action 装饰器
注册到 default_registry，测试可以构造独立的 ActionRegistry。
"""
# @file purpose: Provide action registry, metadata, and step validation.

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Iterable, Optional, Tuple, Type

from pydantic import BaseModel, TypeAdapter

from .action import Step
from .errors import UnknownActionError

# 动作函数的标准签名（异步）: (session, params) -> ActionResult
ActionFn = Callable[..., Awaitable[Any]]


@dataclass(frozen=True)
class ActionMeta:
    """动作元信息：名称 + 绑定的入参模型（可选）"""

    name: str
    params_model: Optional[Type[BaseModel]] = None
    description: str = ""


class ActionRegistry:
    def __init__(self) -> None:
        self._fns: Dict[str, ActionFn] = {}
        self._meta: Dict[str, ActionMeta] = {}

    def register(
        self,
        name: str,
        fn: ActionFn,
        *,
        params_model: Optional[Type[BaseModel]] = None,
        description: str = "",
    ) -> None:
        """非装饰器形式注册，便于动态装配或测试。"""
        name = str(getattr(name, "value", name))
        self._fns[name] = fn
        self._meta[name] = ActionMeta(
            name=name, params_model=params_model, description=description
        )

    def action(
        self, name: str, *, params_model: Optional[Type[BaseModel]] = None
    ) -> Callable[[ActionFn], ActionFn]:
        """
        装饰器：注册动作函数及其参数模型。
            @registry.action("page_goto", params_model=GotoParams)
            async def page_goto(session, params): ...
        """

        def deco(fn: ActionFn) -> ActionFn:
            doc = (fn.__doc__ or "").strip().splitlines()
            self.register(name, fn, params_model=params_model, description=doc[0] if doc else "")
            return fn

        return deco

    def __contains__(self, name: object) -> bool:
        return name in self._fns

    def get_action(self, name: str) -> ActionFn:
        try:
            return self._fns[name]
        except KeyError:
            raise UnknownActionError(name) from None

    def get_meta(self, name: str) -> ActionMeta:
        try:
            return self._meta[name]
        except KeyError:
            raise UnknownActionError(name) from None

    def list_actions(self) -> Dict[str, ActionMeta]:
        """返回一个浅拷贝，便于调试/展示。"""
        return dict(self._meta)

    def validate_step(self, step: Step) -> Tuple[ActionMeta, Optional[BaseModel]]:
        """
        在执行前对 Step 做强校验：
        1) 动作是否已注册（否则 UnknownActionError）
        2) 若绑定了 params_model，则用其校验 arguments（失败抛 ValidationError）
        3) 成功时返回 (ActionMeta, 已解析的 params_model 实例 | None)
        """
        meta = self.get_meta(step.name)
        if meta.params_model is None:
            return meta, None
        adapter = TypeAdapter(meta.params_model)
        return meta, adapter.validate_python(step.arguments)

    def verify(self, names: Iterable[str] | Type[Enum]) -> None:
        """Raise UnknownActionError for the first expected name without a handler."""
        for name in names:
            key = str(getattr(name, "value", name))
            if key not in self._fns:
                raise UnknownActionError(key)


# 内置动作的全局注册表
default_registry = ActionRegistry()
action = default_registry.action
