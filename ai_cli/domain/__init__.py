"""领域层模型与协议。

包含：
- models: Conversation / ChatExchange / ImageJob 等请求与结果模型。
- exceptions: 业务异常类型定义。
"""
