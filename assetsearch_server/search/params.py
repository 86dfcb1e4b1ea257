"""
Tool parameter declarations and default-value policy.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from ..core.config import DEFAULT_PAGE, FOFA, FOFA_DEFAULT_SIZE, HUNTER, HUNTER_DEFAULT_SIZE
from ..core.error import ParameterError
from ..models.schema import AssetType, QueryRequest, TimeRange

DATE_FORMAT = "%Y-%m-%d"

FOFA_QUERY_HELP = (
    "搜索查询语句，支持以下查询语法:\n"
    "1. 基础查询: title=\"百度\"\n"
    "2. IP查询: ip=\"1.1.1.1\"\n"
    "3. 端口查询: port=\"80\"\n"
    "4. 协议查询: protocol=\"http\"\n"
    "5. 国家查询: country=\"CN\"\n"
    "6. 域名查询: domain=\"qq.com\"\n"
    "7. 操作系统查询: os=\"windows\"\n"
    "8. 服务器查询: server=\"nginx\"\n"
    "9. ICP备案查询: icp=\"京ICP备\"\n"
    "10. 证书查询: cert=\"*.example.com\"\n"
    "11. 组合查询: title=\"admin\" && country=\"US\"\n"
    "12. 时间范围查询: after=\"2023-01-01\" && before=\"2023-12-31\"\n"
    "13. 正则查询: title=~\"admin.*\"\n"
    "14. 模糊查询: title=*\"管理后台\"\n"
    "15. 排除查询: !title=\"test\"\n"
    "示例: title=\"管理后台\" && country=\"CN\""
)

FOFA_FIELDS_HELP = (
    "返回字段(逗号分隔)，可选值:\n"
    "1. ip: IP地址\n"
    "2. port: 端口\n"
    "3. protocol: 协议名\n"
    "4. country: 国家代码\n"
    "5. country_name: 国家名\n"
    "6. region: 区域\n"
    "7. city: 城市\n"
    "8. longitude: 经度\n"
    "9. latitude: 纬度\n"
    "10. asn: ASN编号\n"
    "11. org: ASN组织\n"
    "12. host: 主机名\n"
    "13. domain: 域名\n"
    "14. os: 操作系统\n"
    "15. server: 网站server\n"
    "16. icp: ICP备案号\n"
    "17. title: 网站标题\n"
    "18. jarm: JARM指纹\n"
    "19. header: 网站header\n"
    "20. banner: 协议banner\n"
    "21. cert: 证书\n"
    "22. base_protocol: 基础协议\n"
    "23. link: 资产URL\n"
    "24-50: 其他专业版/商业版字段\n"
    "示例: fields=ip,port,title\n"
    "默认: host,ip,port"
)

HUNTER_QUERY_HELP = (
    "搜索查询语句。支持以下语法:\n"
    "- IP搜索: ip=\"1.1.1.1\" 或 ip=\"220.181.111.0/24\"\n"
    "- 端口搜索: ip.port=\"80\"\n"
    "- 域名搜索: domain=\"example.com\"\n"
    "- Web标题搜索: web.title=\"登录页面\"\n"
    "- 响应头搜索: header.server=\"Microsoft-IIS/10\"\n"
    "- 资产类型: is_web=true(web资产)\n"
    "示例: ip=\"1.1.1.1\" && ip.port=\"80\""
)


@dataclass(frozen=True)
class ParamSpec:
    name: str
    type: str
    description: str
    required: bool = False
    default: Any = None

    def to_schema(self) -> Dict[str, Any]:
        schema: Dict[str, Any] = {"type": self.type, "description": self.description}
        if self.default is not None:
            schema["default"] = self.default
        return schema


@dataclass(frozen=True)
class ToolSpec:
    name: str
    backend: str
    description: str
    params: Tuple[ParamSpec, ...]
    default_size: int

    @property
    def param_names(self) -> Tuple[str, ...]:
        return tuple(p.name for p in self.params)

    def input_schema(self) -> Dict[str, Any]:
        """JSON-schema object describing the tool arguments."""
        return {
            "type": "object",
            "properties": {p.name: p.to_schema() for p in self.params},
            "required": [p.name for p in self.params if p.required],
        }


FOFA_TOOL = ToolSpec(
    name="fofa_search",
    backend=FOFA,
    description="FOFA搜索引擎",
    default_size=FOFA_DEFAULT_SIZE,
    params=(
        ParamSpec("query", "string", FOFA_QUERY_HELP, required=True),
        ParamSpec("page", "integer", "页码，默认为1", required=True, default=DEFAULT_PAGE),
        ParamSpec("size", "integer", "每页数量，默认为50", required=True, default=FOFA_DEFAULT_SIZE),
        ParamSpec("fields", "string", FOFA_FIELDS_HELP),
    ),
)

HUNTER_TOOL = ToolSpec(
    name="hunter_search",
    backend=HUNTER,
    description="Hunter搜索引擎",
    default_size=HUNTER_DEFAULT_SIZE,
    params=(
        ParamSpec("query", "string", HUNTER_QUERY_HELP, required=True),
        ParamSpec("page", "integer", "页码，默认为1", required=True, default=DEFAULT_PAGE),
        ParamSpec("size", "integer", "每页数量，默认为20", required=True, default=HUNTER_DEFAULT_SIZE),
        ParamSpec(
            "is_web",
            "integer",
            "资产类型: 1(web资产), 2(非web资产), 3(全部)",
            default=int(AssetType.WEB),
        ),
        ParamSpec("start_time", "string", "开始时间，格式为YYYY-MM-DD"),
        ParamSpec("end_time", "string", "结束时间，格式为YYYY-MM-DD"),
    ),
)

def _to_int(name: str, value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ParameterError(f"{name} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        raise ParameterError(f"{name} must be an integer, got {value!r}")


def _normalize_fields(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        parts = [str(v) for v in value]
    else:
        parts = str(value).split(",")
    ordered: List[str] = []
    for part in parts:
        name = part.strip()
        if name and name not in ordered:
            ordered.append(name)
    return ",".join(ordered) or None


def normalize_positive(value: Optional[int], default: int) -> int:
    if not value or value < 1:
        return default
    return value


def apply_defaults(spec: ToolSpec, arguments: Dict[str, Any]) -> Dict[str, Any]:
    """
    Fill in the default-value policy for ``spec``:
    page -> 1 and size -> the backend default when unset or below 1,
    is_web -> web assets only when unset or 0. Time bounds have no default;
    unset bounds are dropped. Unknown arguments are dropped.

    Applying this twice gives the same result as applying it once.
    """
    names = spec.param_names
    args = {k: v for k, v in (arguments or {}).items() if k in names}

    args["page"] = normalize_positive(_to_int("page", args.get("page")), DEFAULT_PAGE)
    args["size"] = normalize_positive(_to_int("size", args.get("size")), spec.default_size)

    if "is_web" in names:
        is_web = _to_int("is_web", args.get("is_web"))
        args["is_web"] = is_web if is_web else int(AssetType.WEB)

    for key in ("start_time", "end_time"):
        if key in names:
            bound = str(args.get(key) or "").strip()
            if bound:
                args[key] = bound
            else:
                args.pop(key, None)

    if "fields" in names:
        fields = _normalize_fields(args.get("fields"))
        if fields:
            args["fields"] = fields
        else:
            args.pop("fields", None)

    return args


def _check_date(name: str, value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    try:
        datetime.strptime(value, DATE_FORMAT)
    except ValueError:
        raise ParameterError(f"{name} must be formatted as YYYY-MM-DD, got {value!r}")
    return value


def build_query_request(spec: ToolSpec, arguments: Dict[str, Any]) -> QueryRequest:
    """
    Validate defaulted arguments and build the immutable request.
    """
    args = apply_defaults(spec, arguments)

    query = args.get("query")
    if not isinstance(query, str) or not query.strip():
        raise ParameterError("query is required")

    fields = None
    if args.get("fields"):
        fields = tuple(args["fields"].split(","))

    time_range = TimeRange(
        start=_check_date("start_time", args.get("start_time")),
        end=_check_date("end_time", args.get("end_time")),
    )
    if time_range.is_unbounded():
        time_range = None

    asset_type = None
    if "is_web" in args:
        try:
            asset_type = AssetType(args["is_web"])
        except ValueError:
            raise ParameterError(f"is_web must be 1, 2 or 3, got {args['is_web']!r}")

    return QueryRequest(
        raw_query=query,
        page=args["page"],
        size=args["size"],
        fields=fields,
        time_range=time_range,
        asset_type=asset_type,
    )
