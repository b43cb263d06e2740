"""modglide - 对比 Go 模块版本与 glide.lock 记录的提交"""

__version__ = "0.3.0"
